"""
Migrate a flat role-permission dataset to level-based access control.

Missing default levels are created, then every role is merged against its
level in full-role-set mode. Roles come from a legacy export when one is
given; otherwise the roles already stored are re-merged. Running the
migration again leaves role-specific overrides intact.

Usage:
    python -m scripts.migrate_to_level_access [--backup path/to/rolepermissions.json]
"""
import argparse
import asyncio
from pathlib import Path

from hrms.crud.access_level import AccessLevelRepository
from hrms.crud.role import RoleRepository
from hrms.database import AsyncSessionLocal
from hrms.schemas.legacy import parse_legacy_roles
from hrms.services.access.bootstrap import BootstrapService
from scripts.seed_levels_and_roles import load_backup, print_result, print_summary


async def migrate(backup: Path | None = None) -> None:
    async with AsyncSessionLocal() as session:
        service = BootstrapService(AccessLevelRepository(session), RoleRepository(session))

        print("Step 1: ensuring access levels exist...")
        print_result("levels", await service.seed_levels())

        raw_records = load_backup(backup) if backup is not None else None
        if raw_records is not None:
            print("Step 2: merging legacy roles with their levels...")
            print_result("roles", await service.import_legacy_roles(parse_legacy_roles(raw_records)))
        else:
            print("Step 2: merging stored roles with their levels...")
            print_result("roles", await service.resync_existing_roles())

        print("Step 3: verifying migration...")
        print_summary(await service.summarize())


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate roles to level-based access")
    parser.add_argument("--backup", type=Path, default=None, help="Legacy role-permission JSON export")
    args = parser.parse_args()
    asyncio.run(migrate(args.backup))


if __name__ == "__main__":
    main()
