"""create dth22 table

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00

"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_index(inspector: sa.Inspector, table_name: str, columns: tuple[str, ...]) -> bool:
    for index in inspector.get_indexes(table_name):
        index_columns = tuple(index.get("column_names") or ())
        if index_columns == columns:
            return True
    return False


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    table_names = set(inspector.get_table_names())
    created_table = False

    if "dth22" not in table_names:
        op.create_table(
            "dth22",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("unit_name", sa.String(length=120), nullable=False),
            sa.Column("suhu", sa.Float(), nullable=False),
            sa.Column("kelembapan", sa.Float(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
        )
        created_table = True

    if created_table or not _has_index(inspector, "dth22", ("unit_name",)):
        op.create_index("ix_dth22_unit_name", "dth22", ["unit_name"])

    if created_table or not _has_index(inspector, "dth22", ("created_at",)):
        op.create_index("ix_dth22_created_at", "dth22", ["created_at"])


def downgrade() -> None:
    raise RuntimeError(
        "Forward-only migration policy: downgrade is not supported for revision 0001_initial"
    )
