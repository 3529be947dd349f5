"""init

Revision ID: 0001_init
Revises:
Create Date: 2026-09-02
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
  op.create_table(
    "tasks",
    sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
    sa.Column("title", sa.String(length=150), nullable=False),
    sa.Column("description", sa.String(length=1000), nullable=True),
    sa.Column("priority", sa.String(length=16), nullable=False, server_default="LOW"),
    sa.Column("status", sa.String(length=32), nullable=False, server_default="PENDING"),  # PENDING | COMPLETED
    sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
    sa.Column("date_created", sa.DateTime(timezone=True), nullable=False),
    sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
  )
  op.create_index("ix_tasks_deleted", "tasks", ["deleted"])


def downgrade() -> None:
  op.drop_index("ix_tasks_deleted", table_name="tasks")
  op.drop_table("tasks")
