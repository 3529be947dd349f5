from __future__ import annotations

import uuid
from datetime import datetime

from dateutil.relativedelta import relativedelta

from taskboard.models import Task, as_utc
from taskboard.task_fields import RecurrenceType


def compute_next_deadline(
  current_deadline: datetime | None,
  recurrence_type: RecurrenceType | None,
  interval: int | None,
) -> datetime | None:
  """
  Next deadline for a recurring task, or None when recurrence is disabled.

  - interval is clamped to at least 1.
  - MONTHLY steps clamp to the last valid day of the target month
    (Jan 31 + 1 month -> Feb 29 in a leap year).
  """
  if current_deadline is None or recurrence_type is None or recurrence_type == RecurrenceType.NONE:
    return None
  n = max(int(interval or 1), 1)
  if recurrence_type == RecurrenceType.DAILY:
    return current_deadline + relativedelta(days=n)
  if recurrence_type == RecurrenceType.WEEKLY:
    return current_deadline + relativedelta(weeks=n)
  if recurrence_type == RecurrenceType.MONTHLY:
    return current_deadline + relativedelta(months=n)
  return None


def can_create_next(task: Task | None, next_deadline: datetime | None) -> bool:
  if task is None or next_deadline is None:
    return False
  if not task.is_recurring:
    return False
  if task.recurrence_end_at is None:
    return True
  return as_utc(next_deadline) <= as_utc(task.recurrence_end_at)


def new_recurrence_group_id() -> str:
  return f"rec-{uuid.uuid4()}"
