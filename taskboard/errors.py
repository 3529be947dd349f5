from __future__ import annotations

from typing import Any


class TaskError(Exception):
  """Base for every business-rule or input failure raised by the task core.

  Each subclass names a stable ``kind`` so the transport layer can map it to a
  status code without inspecting messages. ``field`` and ``value`` identify the
  offending input where there is one.
  """

  kind = "TaskError"
  default_message = "Task operation failed"

  def __init__(self, message: str | None = None, *, field: str | None = None, value: Any = None) -> None:
    self.message = message or self.default_message
    self.field = field
    self.value = value
    super().__init__(self.message)

  def to_dict(self) -> dict[str, Any]:
    return {"kind": self.kind, "message": self.message, "field": self.field, "value": self.value}


class NotFound(TaskError):
  kind = "NotFound"
  default_message = "Task not found"


class AlreadyDeleted(TaskError):
  kind = "AlreadyDeleted"
  default_message = "Task already successfully deleted"


class NotDeleted(TaskError):
  kind = "NotDeleted"
  default_message = "Task is not deleted"


class AlreadyCompleted(TaskError):
  kind = "AlreadyCompleted"
  default_message = "Task is already completed"


class StatusLocked(TaskError):
  kind = "StatusLocked"
  default_message = "Status cannot be changed once task is DONE"


class InvalidEnumValue(TaskError):
  kind = "InvalidEnumValue"
  default_message = "Invalid enum value"


class InvalidDeadline(TaskError):
  kind = "InvalidDeadline"
  default_message = "Invalid deadline"


class InvalidRecurrence(TaskError):
  kind = "InvalidRecurrence"
  default_message = "Invalid recurrence settings"


class EmptyReorderList(TaskError):
  kind = "EmptyReorderList"
  default_message = "orderedTaskIds must not be empty"


class DuplicateIds(TaskError):
  kind = "DuplicateIds"
  default_message = "orderedTaskIds must not contain duplicates"


class UnknownIds(TaskError):
  kind = "UnknownIds"
  default_message = "orderedTaskIds contains unknown task IDs"


class ColumnMismatch(TaskError):
  kind = "ColumnMismatch"
  default_message = "All tasks must belong to the target status"
