from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from loguru import logger

from taskboard.errors import ColumnMismatch, DuplicateIds, EmptyReorderList, UnknownIds
from taskboard.models import Task
from taskboard.repository import TaskRepository
from taskboard.task_fields import Status, normalize_status


class BoardOrdering:
  """Kanban column ordering: end-of-column insertion and whole-list reorders."""

  def __init__(self, repo: TaskRepository) -> None:
    self.repo = repo

  async def next_order(self, status: Status) -> int:
    top = await self.repo.top_of_column(status)
    if top is None:
      return 1
    return (top.board_order or 0) + 1

  async def reorder_column(self, status: Status, ordered_ids: Sequence[str] | None) -> list[Task]:
    """
    Renumber the listed tasks 1..n in the given sequence.

    The list is authoritative: tasks of the same column that are not listed keep
    their previous board order, which may now collide with the new values.
    Every check runs before any task is touched, so a rejected request changes nothing.
    """
    ids = list(ordered_ids or [])
    if not ids:
      raise EmptyReorderList(field="orderedTaskIds", value=[])

    dupes = sorted(i for i, n in Counter(ids).items() if n > 1)
    if dupes:
      raise DuplicateIds(field="orderedTaskIds", value=dupes)

    tasks = await self.repo.list_active_by_ids(ids)
    by_id = {t.id: t for t in tasks}
    missing = [i for i in ids if i not in by_id]
    if missing:
      raise UnknownIds(field="orderedTaskIds", value=missing)

    wrong_column = [t.id for t in tasks if normalize_status(t.status) != status]
    if wrong_column:
      raise ColumnMismatch(
        f"All tasks must belong to status {status.value}",
        field="orderedTaskIds",
        value=wrong_column,
      )

    ordered = [by_id[i] for i in ids]
    for idx, t in enumerate(ordered, start=1):
      t.board_order = idx
    await self.repo.add_all(ordered)
    logger.debug("Reordered column {} ({} tasks)", status.value, len(ordered))
    return ordered
