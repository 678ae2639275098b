"""
create ldap_auth_user table

Revision ID: 001_create_ldap_auth_user
Revises:
Create Date: 2026-10-19 00:00:01.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from migration_helpers import drop_table_if_exists, index_exists, table_exists

revision = "001_create_ldap_auth_user"
down_revision = None
branch_labels = None
depends_on = None

TABLE_NAME = "ldap_auth_user"
EMAIL_INDEX = f"ix_{TABLE_NAME}_email"


def _create_table() -> None:
    if not table_exists(TABLE_NAME):
        op.create_table(
            TABLE_NAME,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("name", sa.String(255), nullable=True),
            sa.Column("email", sa.String(255), nullable=False),
            # holds the directory DN, not a password hash
            sa.Column("password", sa.String(1024), nullable=True),
            sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("admin", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
        )


def _create_indexes() -> None:
    if not index_exists(TABLE_NAME, EMAIL_INDEX):
        op.create_index(EMAIL_INDEX, TABLE_NAME, ["email"], unique=True)


def upgrade() -> None:
    _create_table()
    _create_indexes()


def downgrade() -> None:
    drop_table_if_exists(TABLE_NAME)
