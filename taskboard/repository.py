from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from taskboard.models import Task
from taskboard.task_fields import Status, status_storage_values


class TaskRepository:
  """Persistence store for tasks, bound to one request session.

  Writes are only flushed here. The caller owns the transaction and commits or
  rolls back once the whole operation has run.
  """

  def __init__(self, db: AsyncSession) -> None:
    self.db = db

  async def get(self, task_id: str) -> Task | None:
    res = await self.db.execute(select(Task).where(Task.id == task_id))
    return res.scalar_one_or_none()

  async def get_active(self, task_id: str) -> Task | None:
    res = await self.db.execute(select(Task).where(Task.id == task_id, Task.deleted.is_(False)))
    return res.scalar_one_or_none()

  async def list_active(self, *, offset: int, limit: int, order_by: Sequence[ColumnElement]) -> list[Task]:
    q = select(Task).where(Task.deleted.is_(False)).order_by(*order_by).offset(offset).limit(limit)
    res = await self.db.execute(q)
    return list(res.scalars().all())

  async def list_deleted(self, *, offset: int, limit: int) -> list[Task]:
    q = (
      select(Task)
      .where(Task.deleted.is_(True))
      .order_by(Task.updated_at.desc(), Task.id.asc())
      .offset(offset)
      .limit(limit)
    )
    res = await self.db.execute(q)
    return list(res.scalars().all())

  async def list_active_by_ids(self, task_ids: Iterable[str]) -> list[Task]:
    ids = list(task_ids)
    if not ids:
      return []
    res = await self.db.execute(select(Task).where(Task.id.in_(ids), Task.deleted.is_(False)))
    return list(res.scalars().all())

  async def top_of_column(self, status: Status) -> Task | None:
    # Tasks without an order rank below ordered ones.
    res = await self.db.execute(
      select(Task)
      .where(Task.deleted.is_(False), Task.status.in_(status_storage_values(status)))
      .order_by(Task.board_order.desc().nulls_last(), Task.id.asc())
      .limit(1)
    )
    return res.scalar_one_or_none()

  async def add(self, task: Task) -> Task:
    self.db.add(task)
    await self.db.flush()
    return task

  async def add_all(self, tasks: Iterable[Task]) -> list[Task]:
    items = list(tasks)
    self.db.add_all(items)
    await self.db.flush()
    return items
