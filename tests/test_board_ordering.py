from __future__ import annotations

import pytest
from sqlalchemy import select, text

from conftest import make_task
from taskboard.board.service import BoardOrdering
from taskboard.db import SessionLocal
from taskboard.errors import ColumnMismatch, DuplicateIds, EmptyReorderList, InvalidEnumValue, UnknownIds
from taskboard.models import Task
from taskboard.repository import TaskRepository
from taskboard.task_fields import Status
from taskboard.tasks.service import TaskService


async def _orders(ids: list[str]) -> dict[str, int | None]:
  async with SessionLocal() as s:
    res = await s.execute(select(Task.id, Task.board_order).where(Task.id.in_(ids)))
    return {row[0]: row[1] for row in res.all()}


async def _insert_legacy(task_id: str, status: str, board_order: int | None) -> None:
  async with SessionLocal() as s:
    await s.execute(
      text(
        "INSERT INTO tasks (id, title, priority, status, board_order, date_created, "
        "recurrence_type, recurrence_interval, deleted, updated_at) "
        "VALUES (:id, :title, 'LOW', :status, :board_order, '2025-01-01 00:00:00.000000', "
        "'NONE', 1, 0, '2025-01-01 00:00:00.000000')"
      ),
      {"id": task_id, "title": f"legacy {task_id}", "status": status, "board_order": board_order},
    )
    await s.commit()


@pytest.mark.anyio
async def test_next_order_starts_at_one_and_appends(db) -> None:
  board = BoardOrdering(TaskRepository(db))
  assert await board.next_order(Status.TODO) == 1

  a = await make_task(db, "a")
  b = await make_task(db, "b")
  c = await make_task(db, "c", status="IN_PROGRESS")

  assert (a.board_order, b.board_order) == (1, 2)
  assert c.board_order == 1
  assert await board.next_order(Status.TODO) == 3
  assert await board.next_order(Status.DONE) == 1


@pytest.mark.anyio
async def test_next_order_ignores_deleted_tasks(db) -> None:
  await make_task(db, "a")
  b = await make_task(db, "b")
  await TaskService(db).delete_task(b.id)
  await db.commit()

  assert await BoardOrdering(TaskRepository(db)).next_order(Status.TODO) == 2


@pytest.mark.anyio
async def test_reorder_assigns_positions_in_given_sequence(db) -> None:
  t1 = await make_task(db, "one")
  t2 = await make_task(db, "two")
  t3 = await make_task(db, "three")

  await TaskService(db).reorder_board("TODO", [t3.id, t1.id, t2.id])
  await db.commit()

  assert await _orders([t1.id, t2.id, t3.id]) == {t3.id: 1, t1.id: 2, t2.id: 3}


@pytest.mark.anyio
async def test_reorder_partial_list_leaves_unlisted_tasks_alone(db) -> None:
  t1 = await make_task(db, "one")
  t2 = await make_task(db, "two")
  t3 = await make_task(db, "three")

  await TaskService(db).reorder_board("todo", [t3.id, t2.id])
  await db.commit()

  assert await _orders([t1.id, t2.id, t3.id]) == {t3.id: 1, t2.id: 2, t1.id: 1}


@pytest.mark.anyio
async def test_reorder_rejects_empty_list(db) -> None:
  with pytest.raises(EmptyReorderList):
    await TaskService(db).reorder_board("TODO", [])
  with pytest.raises(EmptyReorderList):
    await TaskService(db).reorder_board("TODO", None)


@pytest.mark.anyio
async def test_reorder_rejects_duplicates_without_changes(db) -> None:
  id1 = (await make_task(db, "one")).id
  id2 = (await make_task(db, "two")).id

  with pytest.raises(DuplicateIds) as exc:
    await TaskService(db).reorder_board("TODO", [id2, id1, id2])
  await db.rollback()

  assert exc.value.value == [id2]
  assert await _orders([id1, id2]) == {id1: 1, id2: 2}


@pytest.mark.anyio
async def test_reorder_rejects_unknown_and_deleted_ids(db) -> None:
  id1 = (await make_task(db, "one")).id
  id2 = (await make_task(db, "two")).id
  await TaskService(db).delete_task(id2)
  await db.commit()

  with pytest.raises(UnknownIds) as exc:
    await TaskService(db).reorder_board("TODO", [id1, "missing", id2])
  await db.rollback()

  assert exc.value.value == ["missing", id2]
  assert await _orders([id1]) == {id1: 1}


@pytest.mark.anyio
async def test_reorder_rejects_tasks_from_another_column(db) -> None:
  id1 = (await make_task(db, "one")).id
  id2 = (await make_task(db, "two", status="IN_PROGRESS")).id

  with pytest.raises(ColumnMismatch) as exc:
    await TaskService(db).reorder_board("TODO", [id2, id1])
  await db.rollback()

  assert exc.value.value == [id2]
  assert await _orders([id1, id2]) == {id1: 1, id2: 1}


@pytest.mark.anyio
async def test_reorder_requires_valid_status(db) -> None:
  t1 = await make_task(db, "one")

  with pytest.raises(InvalidEnumValue):
    await TaskService(db).reorder_board(" ", [t1.id])
  with pytest.raises(InvalidEnumValue):
    await TaskService(db).reorder_board("BLOCKED", [t1.id])


@pytest.mark.anyio
async def test_legacy_pending_rows_belong_to_todo_column(db) -> None:
  await _insert_legacy("legacy-1", "PENDING", 5)
  t = await make_task(db, "fresh")

  assert t.board_order == 6

  loaded = await TaskService(db).get_task("legacy-1")
  assert loaded.status is Status.TODO

  await TaskService(db).reorder_board("TODO", [t.id, "legacy-1"])
  await db.commit()
  assert await _orders([t.id, "legacy-1"]) == {t.id: 1, "legacy-1": 2}


@pytest.mark.anyio
async def test_restore_without_order_appends_to_column(db) -> None:
  await make_task(db, "a")
  await make_task(db, "b")
  await _insert_legacy("old-deleted", "PENDING", None)
  async with SessionLocal() as s:
    await s.execute(text("UPDATE tasks SET deleted = 1 WHERE id = 'old-deleted'"))
    await s.commit()

  restored = await TaskService(db).restore_task("old-deleted")
  await db.commit()

  assert restored.deleted is False
  assert restored.status is Status.TODO
  assert restored.board_order == 3


@pytest.mark.anyio
async def test_unordered_tasks_rank_below_ordered_ones(db) -> None:
  await _insert_legacy("legacy-null", "TODO", None)
  await _insert_legacy("legacy-3", "TODO", 3)

  assert await BoardOrdering(TaskRepository(db)).next_order(Status.TODO) == 4
