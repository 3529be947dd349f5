from __future__ import annotations

import re
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from taskboard.models import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH


_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_dt_utc(value: object) -> object:
  if value is None:
    return None
  if isinstance(value, datetime):
    dt = value
  elif isinstance(value, str):
    s = value.strip()
    if not s:
      return None
    if _DATE_ONLY_RE.fullmatch(s):
      dt = datetime.fromisoformat(s)
    else:
      dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
  else:
    return value

  if dt.tzinfo is None:
    return dt.replace(tzinfo=timezone.utc)
  return dt.astimezone(timezone.utc)


def _strip_title(value: object) -> object:
  if isinstance(value, str):
    value = value.strip()
    if not value:
      raise ValueError("Title is required")
  return value


class TaskCreateIn(BaseModel):
  title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
  description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
  priority: str | None = None
  status: str | None = None
  deadline: datetime | None = None
  boardOrder: int | None = None
  recurrenceType: str | None = None
  recurrenceInterval: int | None = None
  recurrenceEndAt: datetime | None = None
  recurrenceGroupId: str | None = Field(default=None, max_length=64)

  @field_validator("title", mode="before")
  @classmethod
  def _title_not_blank(cls, v: object) -> object:
    return _strip_title(v)

  @field_validator("deadline", "recurrenceEndAt", mode="before")
  @classmethod
  def _dt_to_utc(cls, v: object) -> object:
    return _parse_dt_utc(v)


class TaskUpdateIn(BaseModel):
  """Partial update: only fields present in the request body are applied."""

  title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
  description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
  priority: str | None = None
  status: str | None = None
  deadline: datetime | None = None
  boardOrder: int | None = None
  recurrenceType: str | None = None
  recurrenceInterval: int | None = None
  recurrenceEndAt: datetime | None = None
  recurrenceGroupId: str | None = Field(default=None, max_length=64)

  @field_validator("title", mode="before")
  @classmethod
  def _title_not_blank(cls, v: object) -> object:
    return _strip_title(v)

  @field_validator("deadline", "recurrenceEndAt", mode="before")
  @classmethod
  def _dt_to_utc(cls, v: object) -> object:
    return _parse_dt_utc(v)


class TaskStatusUpdateIn(BaseModel):
  status: str | None = None
  boardOrder: int | None = None


class TaskBoardReorderIn(BaseModel):
  status: str | None = None
  orderedTaskIds: list[str] = []


class TaskOut(BaseModel):
  id: str
  title: str
  description: str | None
  priority: str | None
  status: str | None
  boardOrder: int | None
  deadline: datetime | None
  dateCreated: datetime | None
  recurrenceType: str | None
  recurrenceInterval: int | None
  recurrenceEndAt: datetime | None
  recurrenceGroupId: str | None
  deleted: bool = False
  updatedAt: datetime | None = None


class MessageOut(BaseModel):
  status: int
  message: str
