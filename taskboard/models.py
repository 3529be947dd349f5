from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, String, TypeDecorator
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, validates

from taskboard.errors import AlreadyCompleted, InvalidDeadline
from taskboard.task_fields import (
  Priority,
  RecurrenceType,
  Status,
  normalize_status,
  parse_priority,
  parse_recurrence_type,
  parse_status,
)

TITLE_MAX_LENGTH = 150
DESCRIPTION_MAX_LENGTH = 1000


def utcnow() -> datetime:
  return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
  if value is None:
    return None
  if value.tzinfo is None:
    return value.replace(tzinfo=timezone.utc)
  return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
  """Timezone-aware UTC datetimes on every backend, including SQLite which drops tzinfo."""

  impl = DateTime
  cache_ok = True

  def __init__(self) -> None:
    super().__init__(timezone=True)

  def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
    value = as_utc(value)
    if value is not None and dialect.name == "sqlite":
      return value.replace(tzinfo=None)
    return value

  def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
    return as_utc(value)


class StatusType(TypeDecorator):
  """Stores canonical status strings and folds legacy ones when rows are loaded.

  Raw strings are bound unchanged so column queries can match legacy values too.
  """

  impl = String
  cache_ok = True

  def __init__(self) -> None:
    super().__init__(length=32)

  def process_bind_param(self, value: Status | str | None, dialect: Any) -> str | None:
    if value is None:
      return None
    if isinstance(value, Status):
      return value.value
    return str(value)

  def process_result_value(self, value: str | None, dialect: Any) -> Status | None:
    return normalize_status(value)


class Base(DeclarativeBase):
  pass


class Task(Base):
  __tablename__ = "tasks"

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
  title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
  description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
  priority: Mapped[Priority] = mapped_column(SAEnum(Priority, native_enum=False, length=16), nullable=False)
  status: Mapped[Status] = mapped_column(StatusType(), nullable=False, index=True)
  board_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
  deadline: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
  date_created: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
  recurrence_type: Mapped[RecurrenceType] = mapped_column(
    SAEnum(RecurrenceType, native_enum=False, length=16), nullable=False, default=RecurrenceType.NONE
  )
  recurrence_interval: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
  recurrence_end_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
  recurrence_group_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
  deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
  updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

  @validates("status")
  def _normalize_status_on_write(self, _key: str, value: Status | str | None) -> Status | None:
    return normalize_status(value)

  @property
  def is_recurring(self) -> bool:
    return self.recurrence_type is not None and self.recurrence_type != RecurrenceType.NONE

  def apply_creation_defaults(self, now: datetime | None = None) -> None:
    if self.date_created is None:
      self.date_created = now or utcnow()
    if self.status is None:
      self.status = Status.TODO
    if self.priority is None:
      self.priority = Priority.LOW
    if self.recurrence_type is None:
      self.recurrence_type = RecurrenceType.NONE
    self.recurrence_interval = max(self.recurrence_interval or 1, 1)
    self.deleted = False

  def mark_completed(self) -> None:
    if normalize_status(self.status) == Status.DONE:
      raise AlreadyCompleted(field="status", value=Status.DONE.value)
    self.status = Status.DONE

  def update_deadline(self, new_deadline: datetime | None, now: datetime | None = None) -> None:
    if new_deadline is None:
      self.deadline = None
      return
    new_deadline = as_utc(new_deadline)
    now = now or utcnow()
    if new_deadline < now:
      raise InvalidDeadline("Deadline cannot be in the past", field="deadline", value=new_deadline.isoformat())
    created = as_utc(self.date_created)
    if created is not None and new_deadline < created:
      raise InvalidDeadline(
        "Deadline cannot be before the task creation date", field="deadline", value=new_deadline.isoformat()
      )
    self.deadline = new_deadline

  def set_priority_safe(self, value: str | None) -> None:
    self.priority = parse_priority(value)

  def set_status_safe(self, value: str | None) -> None:
    self.status = parse_status(value)

  def set_recurrence_type_safe(self, value: str | None) -> None:
    self.recurrence_type = parse_recurrence_type(value)

  def soft_delete(self) -> None:
    self.deleted = True


def new_task(*, now: datetime | None = None, **fields: Any) -> Task:
  """Build a transient Task with creation defaults applied; nothing is persisted."""
  t = Task(**fields)
  t.apply_creation_defaults(now)
  return t
