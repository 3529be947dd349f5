from __future__ import annotations

from enum import Enum

from taskboard.errors import InvalidEnumValue


class Priority(str, Enum):
  HIGH = "HIGH"
  MODERATE = "MODERATE"
  LOW = "LOW"


class Status(str, Enum):
  TODO = "TODO"
  IN_PROGRESS = "IN_PROGRESS"
  DONE = "DONE"


class RecurrenceType(str, Enum):
  NONE = "NONE"
  DAILY = "DAILY"
  WEEKLY = "WEEKLY"
  MONTHLY = "MONTHLY"


# Values written by older API versions; still present in stored rows and accepted from clients.
LEGACY_STATUS_ALIASES: dict[str, Status] = {
  "PENDING": Status.TODO,
  "COMPLETED": Status.DONE,
}


def _allowed(enum_cls: type[Enum]) -> str:
  return ", ".join(m.value for m in enum_cls)


def _clean(value: object) -> str | None:
  if value is None:
    return None
  if isinstance(value, Enum):
    return str(value.value)
  txt = str(value).strip()
  return txt.upper() if txt else None


def parse_status(value: object, *, field: str = "status") -> Status | None:
  """Parse a status string, folding legacy aliases. Blank input yields None."""
  key = _clean(value)
  if key is None:
    return None
  if key in LEGACY_STATUS_ALIASES:
    return LEGACY_STATUS_ALIASES[key]
  try:
    return Status(key)
  except ValueError:
    raise InvalidEnumValue(
      f"Invalid status value. Allowed values: {_allowed(Status)}", field=field, value=value
    ) from None


def parse_priority(value: object, *, field: str = "priority") -> Priority | None:
  key = _clean(value)
  if key is None:
    return None
  try:
    return Priority(key)
  except ValueError:
    raise InvalidEnumValue(
      f"Invalid priority value. Allowed values: {_allowed(Priority)}", field=field, value=value
    ) from None


def parse_recurrence_type(value: object, *, field: str = "recurrenceType") -> RecurrenceType:
  key = _clean(value)
  if key is None:
    return RecurrenceType.NONE
  try:
    return RecurrenceType(key)
  except ValueError:
    raise InvalidEnumValue(
      f"Invalid recurrence type. Allowed values: {_allowed(RecurrenceType)}", field=field, value=value
    ) from None


def normalize_status(status: Status | str | None) -> Status | None:
  """Normalize a stored or in-memory status value; unknown stored strings are passed to parse_status."""
  if status is None or isinstance(status, Status):
    return status
  return parse_status(status)


def status_storage_values(status: Status) -> list[str]:
  """Every raw column value that belongs to the given status column."""
  return [status.value] + [legacy for legacy, canonical in LEGACY_STATUS_ALIASES.items() if canonical is status]
