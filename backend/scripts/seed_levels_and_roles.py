"""
Seed the default access levels and roles.

Levels 0-4 are created first, without any cascade. Roles are then either
created from the default table or imported from a legacy role-permission
export. Records that already exist are skipped, so the script can be re-run.

Usage:
    python -m scripts.seed_levels_and_roles
    python -m scripts.seed_levels_and_roles --import-backup path/to/rolepermissions.json
"""
import argparse
import asyncio
import json
from pathlib import Path

from hrms.crud.access_level import AccessLevelRepository
from hrms.crud.role import RoleRepository
from hrms.database import AsyncSessionLocal
from hrms.schemas.legacy import parse_legacy_roles
from hrms.services.access.bootstrap import BootstrapResult, BootstrapService, BootstrapSummary


def print_result(label: str, result: BootstrapResult) -> None:
    print(f"  {label}: created={len(result.created)} updated={len(result.updated)} "
          f"skipped={len(result.skipped)} failed={len(result.failed)}")
    for item in result.failed:
        print(f"    ! failed: {item}")


def print_summary(summary: BootstrapSummary) -> None:
    print("\nSummary")
    print(f"  Access levels: {summary.level_count}")
    print(f"  Roles: {summary.role_count}")
    for level, count in sorted(summary.roles_per_level.items()):
        print(f"    level {level}: {count} role(s)")
    print(f"  Roles with overrides: {summary.roles_with_overrides}")


def load_backup(path: Path) -> list | None:
    if not path.exists():
        print(f"  Backup file {path} not found, using default roles")
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"  Could not read backup file {path}: {exc}, using default roles")
        return None
    if not isinstance(data, list):
        print(f"  Backup file {path} does not contain a list, using default roles")
        return None
    print(f"  Read {len(data)} role record(s) from {path}")
    return data


async def seed(import_backup: Path | None = None) -> None:
    async with AsyncSessionLocal() as session:
        service = BootstrapService(AccessLevelRepository(session), RoleRepository(session))

        print("Step 1: seeding access levels...")
        print_result("levels", await service.seed_levels())

        raw_records = load_backup(import_backup) if import_backup is not None else None
        if raw_records is not None:
            print("Step 2: importing roles from backup...")
            records = parse_legacy_roles(raw_records)
            print_result("roles", await service.import_legacy_roles(records))
        else:
            print("Step 2: seeding default roles...")
            print_result("roles", await service.seed_default_roles())

        print_summary(await service.summarize())


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed access levels and roles")
    parser.add_argument(
        "--import-backup",
        type=Path,
        default=None,
        help="Legacy role-permission JSON export to import instead of default roles",
    )
    args = parser.parse_args()
    asyncio.run(seed(args.import_backup))


if __name__ == "__main__":
    main()
