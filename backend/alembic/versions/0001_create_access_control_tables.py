"""Create access control tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Tables:
- access_levels: hierarchy levels with default component/feature permissions
- roles: roles referencing a level by number, with merged permissions
- audit_logs: administrative change trail

Level numbers are unique among active levels only, so a soft-deleted level
does not block re-creating the same number.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str | None = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Apply schema changes."""
    op.create_table(
        "access_levels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("component_permissions", sa.JSON(), nullable=False),
        sa.Column("feature_permissions", sa.JSON(), nullable=False),
        sa.Column("cascade_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_system_level", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "uq_access_levels_active_level",
        "access_levels",
        ["level"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("role_id", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("hierarchy_level", sa.Integer(), nullable=False),
        sa.Column("component_permissions", sa.JSON(), nullable=False),
        sa.Column("feature_permissions", sa.JSON(), nullable=False),
        sa.Column("is_system_role", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_roles_role_id", "roles", ["role_id"], unique=True)
    op.create_index("ix_roles_hierarchy_level", "roles", ["hierarchy_level"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor_subject", sa.String(length=255), nullable=False),
        sa.Column("actor_role", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=255), nullable=False),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    for column in ("actor_subject", "action", "entity_type", "entity_id", "created_at"):
        op.create_index(f"ix_audit_logs_{column}", "audit_logs", [column])


def downgrade() -> None:
    """Revert schema changes."""
    for column in ("actor_subject", "action", "entity_type", "entity_id", "created_at"):
        op.drop_index(f"ix_audit_logs_{column}", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_roles_hierarchy_level", table_name="roles")
    op.drop_index("ix_roles_role_id", table_name="roles")
    op.drop_table("roles")

    op.drop_index("uq_access_levels_active_level", table_name="access_levels")
    op.drop_table("access_levels")
