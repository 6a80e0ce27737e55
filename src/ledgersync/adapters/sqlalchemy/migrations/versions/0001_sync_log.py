"""create sync log table

Revision ID: 0001_sync_log
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_sync_log"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "ledgersync_sync_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "kind",
            sa.Enum("SUCCESS", "ERROR", name="logkind", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("remote_contact_id", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_ledgersync_sync_log")),
    )
    op.create_index(
        op.f("ix_ledgersync_sync_log_order_id"),
        "ledgersync_sync_log",
        ["order_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_ledgersync_sync_log_order_id"), table_name="ledgersync_sync_log")
    op.drop_table("ledgersync_sync_log")
