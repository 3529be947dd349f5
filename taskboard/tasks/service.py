from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.board.service import BoardOrdering
from taskboard.errors import (
  AlreadyDeleted,
  InvalidEnumValue,
  InvalidRecurrence,
  NotDeleted,
  NotFound,
  StatusLocked,
)
from taskboard.models import Task, as_utc, new_task, utcnow
from taskboard.recurrence.service import can_create_next, compute_next_deadline, new_recurrence_group_id
from taskboard.repository import TaskRepository
from taskboard.schemas import TaskCreateIn, TaskUpdateIn
from taskboard.task_fields import RecurrenceType, Status, parse_priority, parse_recurrence_type, parse_status

SORT_FIELDS = {
  "deadline": Task.deadline,
  "priority": Task.priority,
  "status": Task.status,
  "dateCreated": Task.date_created,
}
DEFAULT_SORT_FIELD = "dateCreated"


def _check_interval(value: int | None) -> None:
  if value is not None and value < 1:
    raise InvalidRecurrence("Recurrence interval must be at least 1", field="recurrenceInterval", value=value)


def _normalize_recurrence_defaults(t: Task) -> None:
  if t.recurrence_type is None:
    t.recurrence_type = RecurrenceType.NONE
  if t.recurrence_interval is None or t.recurrence_interval < 1:
    t.recurrence_interval = 1


def _validate_recurrence(t: Task) -> None:
  _check_interval(t.recurrence_interval)
  if not t.is_recurring:
    return
  if t.deadline is None:
    raise InvalidRecurrence("Recurring tasks must have a deadline", field="deadline", value=None)
  if t.recurrence_end_at is not None and as_utc(t.recurrence_end_at) < as_utc(t.deadline):
    raise InvalidRecurrence(
      "Recurrence end date must not be before deadline",
      field="recurrenceEndAt",
      value=as_utc(t.recurrence_end_at).isoformat(),
    )


def _enforce_done_lock(previous: Status | None, requested: Status | None) -> None:
  if requested is None:
    return
  if previous == Status.DONE and requested != Status.DONE:
    raise StatusLocked(field="status", value=requested.value)


def _require_status(value: str | None) -> Status:
  status = parse_status(value)
  if status is None:
    raise InvalidEnumValue("Status is required", field="status", value=value)
  return status


class TaskService:
  """
  Task lifecycle: creation, edits, Kanban moves, soft delete/restore and completion.

  Every method works inside the caller's session and only flushes. The request
  dependency commits once the operation returns and rolls back if it raises, so
  each call is a single transaction.
  """

  def __init__(self, db: AsyncSession) -> None:
    self.repo = TaskRepository(db)
    self.board = BoardOrdering(self.repo)

  async def _find_active(self, task_id: str) -> Task:
    t = await self.repo.get_active(task_id)
    if not t:
      raise NotFound(f"Task not found with id: {task_id}", field="id", value=task_id)
    return t

  async def _find_any(self, task_id: str) -> Task:
    t = await self.repo.get(task_id)
    if not t:
      raise NotFound(f"Task not found with id: {task_id}", field="id", value=task_id)
    return t

  async def create_task(self, payload: TaskCreateIn, *, now: datetime | None = None) -> Task:
    now = now or utcnow()
    _check_interval(payload.recurrenceInterval)
    t = new_task(
      now=now,
      title=payload.title,
      description=payload.description,
      priority=parse_priority(payload.priority),
      status=parse_status(payload.status),
      board_order=payload.boardOrder,
      deadline=payload.deadline,
      recurrence_type=parse_recurrence_type(payload.recurrenceType),
      recurrence_interval=payload.recurrenceInterval,
      recurrence_end_at=payload.recurrenceEndAt,
      recurrence_group_id=payload.recurrenceGroupId,
    )
    _normalize_recurrence_defaults(t)
    _validate_recurrence(t)
    if t.board_order is None:
      t.board_order = await self.board.next_order(t.status)
    t.update_deadline(t.deadline, now=now)
    await self.repo.add(t)
    logger.info("Created task {} in {} at position {}", t.id, t.status.value, t.board_order)
    return t

  async def get_task(self, task_id: str) -> Task:
    return await self._find_active(task_id)

  async def list_tasks(
    self,
    *,
    page: int = 0,
    size: int = 10,
    sort_by: str | None = None,
    sort_dir: str | None = None,
  ) -> list[Task]:
    column = SORT_FIELDS.get(sort_by or "", SORT_FIELDS[DEFAULT_SORT_FIELD])
    ascending = (sort_dir or "").strip().lower() == "asc"
    primary = column.asc() if ascending else column.desc()
    size = max(size, 1)
    return await self.repo.list_active(offset=max(page, 0) * size, limit=size, order_by=[primary, Task.id.asc()])

  async def list_deleted(self, *, page: int = 0, size: int = 10) -> list[Task]:
    size = max(size, 1)
    return await self.repo.list_deleted(offset=max(page, 0) * size, limit=size)

  async def update_task(self, task_id: str, payload: TaskUpdateIn, *, now: datetime | None = None) -> Task:
    t = await self._find_active(task_id)
    fields_set = payload.model_fields_set
    previous_status = t.status
    requested_status = parse_status(payload.status) if payload.status is not None else None
    _enforce_done_lock(previous_status, requested_status)
    _check_interval(payload.recurrenceInterval)

    # Resolve the destination slot before the task itself moves columns.
    moved = requested_status is not None and requested_status != previous_status
    new_order = None
    if moved and payload.boardOrder is None:
      new_order = await self.board.next_order(requested_status)

    if payload.title is not None:
      t.title = payload.title
    if "description" in fields_set:
      t.description = payload.description
    if (payload.priority or "").strip():
      t.set_priority_safe(payload.priority)
    if requested_status is not None:
      t.status = requested_status
    if payload.boardOrder is not None:
      t.board_order = payload.boardOrder
    elif new_order is not None:
      t.board_order = new_order
    if (payload.recurrenceType or "").strip():
      t.set_recurrence_type_safe(payload.recurrenceType)
    if payload.recurrenceInterval is not None:
      t.recurrence_interval = payload.recurrenceInterval
    if "recurrenceEndAt" in fields_set:
      t.recurrence_end_at = payload.recurrenceEndAt
    if payload.recurrenceGroupId is not None:
      t.recurrence_group_id = payload.recurrenceGroupId
    if "deadline" in fields_set:
      t.update_deadline(payload.deadline, now=now)

    _normalize_recurrence_defaults(t)
    _validate_recurrence(t)
    await self.repo.add(t)
    logger.debug("Updated task {} fields={}", t.id, sorted(fields_set))
    return t

  async def update_status(self, task_id: str, status: str | None, board_order: int | None = None) -> Task:
    t = await self._find_active(task_id)
    target = _require_status(status)
    previous = t.status
    _enforce_done_lock(previous, target)
    if board_order is not None and board_order > 0:
      order = board_order
    else:
      order = await self.board.next_order(target)
    t.status = target
    t.board_order = order
    await self.repo.add(t)
    logger.info("Moved task {} {} -> {} at position {}", t.id, previous.value, target.value, order)
    return t

  async def reorder_board(self, status: str | None, ordered_ids: Sequence[str] | None) -> list[Task]:
    return await self.board.reorder_column(_require_status(status), ordered_ids)

  async def delete_task(self, task_id: str) -> Task:
    t = await self._find_any(task_id)
    if t.deleted:
      raise AlreadyDeleted(field="id", value=task_id)
    t.soft_delete()
    await self.repo.add(t)
    logger.info("Soft-deleted task {}", t.id)
    return t

  async def restore_task(self, task_id: str) -> Task:
    t = await self._find_any(task_id)
    if not t.deleted:
      raise NotDeleted(field="id", value=task_id)
    if t.status is None:
      t.status = Status.TODO
    if t.board_order is None:
      t.board_order = await self.board.next_order(t.status)
    t.deleted = False
    await self.repo.add(t)
    logger.info("Restored task {} into {} at position {}", t.id, t.status.value, t.board_order)
    return t

  async def complete_task(self, task_id: str, *, now: datetime | None = None) -> Task:
    t = await self._find_active(task_id)
    t.mark_completed()
    await self.repo.add(t)
    logger.info("Completed task {}", t.id)
    await self._create_next_occurrence(t, now=now)
    return t

  async def _create_next_occurrence(self, current: Task, *, now: datetime | None = None) -> Task | None:
    """At most one follow-up per completion; the new task is never completed here, so nothing cascades."""
    if not current.is_recurring:
      return None
    next_deadline = compute_next_deadline(current.deadline, current.recurrence_type, current.recurrence_interval)
    if not can_create_next(current, next_deadline):
      logger.debug("Recurrence of task {} ended (next deadline {})", current.id, next_deadline)
      return None

    if not (current.recurrence_group_id or "").strip():
      current.recurrence_group_id = new_recurrence_group_id()
      await self.repo.add(current)

    now = now or utcnow()
    nxt = new_task(
      now=now,
      title=current.title,
      description=current.description,
      priority=current.priority,
      status=Status.TODO,
      board_order=await self.board.next_order(Status.TODO),
      recurrence_type=current.recurrence_type,
      recurrence_interval=current.recurrence_interval,
      recurrence_end_at=current.recurrence_end_at,
      recurrence_group_id=current.recurrence_group_id,
    )
    nxt.update_deadline(next_deadline, now=now)
    await self.repo.add(nxt)
    logger.info("Created next occurrence {} of task {} due {}", nxt.id, current.id, nxt.deadline)
    return nxt
