"""kanban board order + recurrence

Revision ID: 0002_kanban_recurrence
Revises: 0001_init
Create Date: 2026-10-03
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_kanban_recurrence"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade() -> None:
  # Legacy PENDING/COMPLETED rows stay as-is; they are folded to TODO/DONE when loaded.
  op.alter_column("tasks", "status", server_default="TODO")
  op.add_column("tasks", sa.Column("board_order", sa.Integer(), nullable=True))
  op.add_column("tasks", sa.Column("recurrence_type", sa.String(length=16), nullable=False, server_default="NONE"))
  op.add_column("tasks", sa.Column("recurrence_interval", sa.Integer(), nullable=False, server_default="1"))
  op.add_column("tasks", sa.Column("recurrence_end_at", sa.DateTime(timezone=True), nullable=True))
  op.add_column("tasks", sa.Column("recurrence_group_id", sa.String(length=64), nullable=True))
  op.add_column(
    "tasks",
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
  )
  op.create_index("ix_tasks_status", "tasks", ["status"])
  op.create_index("ix_tasks_recurrence_group_id", "tasks", ["recurrence_group_id"])


def downgrade() -> None:
  op.drop_index("ix_tasks_recurrence_group_id", table_name="tasks")
  op.drop_index("ix_tasks_status", table_name="tasks")
  op.drop_column("tasks", "updated_at")
  op.drop_column("tasks", "recurrence_group_id")
  op.drop_column("tasks", "recurrence_end_at")
  op.drop_column("tasks", "recurrence_interval")
  op.drop_column("tasks", "recurrence_type")
  op.drop_column("tasks", "board_order")
  op.alter_column("tasks", "status", server_default="PENDING")
