"""
Helper functions for Alembic migrations.
They make migrations idempotent by checking if objects exist before creating them.
"""

from alembic import op
import sqlalchemy as sa


def table_exists(table_name: str) -> bool:
    """Check if a table exists on the migration connection."""
    return sa.inspect(op.get_bind()).has_table(table_name)


def index_exists(table_name: str, index_name: str) -> bool:
    """Check if an index exists on the given table."""
    if not table_exists(table_name):
        return False
    indexes = sa.inspect(op.get_bind()).get_indexes(table_name)
    return any(ix["name"] == index_name for ix in indexes)


def drop_table_if_exists(table_name: str) -> None:
    if table_exists(table_name):
        op.drop_table(table_name)
