from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import settings
from taskboard.deps import get_db
from taskboard.models import Task
from taskboard.schemas import (
  MessageOut,
  TaskBoardReorderIn,
  TaskCreateIn,
  TaskOut,
  TaskStatusUpdateIn,
  TaskUpdateIn,
)
from taskboard.tasks.service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _task_out(t: Task) -> TaskOut:
  return TaskOut(
    id=t.id,
    title=t.title,
    description=t.description,
    priority=t.priority.value if t.priority else None,
    status=t.status.value if t.status else None,
    boardOrder=t.board_order,
    deadline=t.deadline,
    dateCreated=t.date_created,
    recurrenceType=t.recurrence_type.value if t.recurrence_type else None,
    recurrenceInterval=t.recurrence_interval,
    recurrenceEndAt=t.recurrence_end_at,
    recurrenceGroupId=t.recurrence_group_id,
    deleted=bool(t.deleted),
    updatedAt=t.updated_at,
  )


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreateIn, db: AsyncSession = Depends(get_db)) -> TaskOut:
  t = await TaskService(db).create_task(payload)
  await db.commit()
  return _task_out(t)


@router.get("", response_model=list[TaskOut])
async def list_tasks(
  page: int = Query(default=0, ge=0),
  size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
  sortBy: str = "dateCreated",
  sortDir: str = "desc",
  db: AsyncSession = Depends(get_db),
) -> list[TaskOut]:
  tasks = await TaskService(db).list_tasks(page=page, size=size, sort_by=sortBy, sort_dir=sortDir)
  return [_task_out(t) for t in tasks]


@router.get("/deleted", response_model=list[TaskOut])
async def list_deleted_tasks(
  page: int = Query(default=0, ge=0),
  size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
  db: AsyncSession = Depends(get_db),
) -> list[TaskOut]:
  tasks = await TaskService(db).list_deleted(page=page, size=size)
  return [_task_out(t) for t in tasks]


@router.patch("/board/reorder", response_model=MessageOut)
async def reorder_board(payload: TaskBoardReorderIn, db: AsyncSession = Depends(get_db)) -> MessageOut:
  await TaskService(db).reorder_board(payload.status, payload.orderedTaskIds)
  await db.commit()
  return MessageOut(status=status.HTTP_200_OK, message="Board reordered successfully")


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(task_id: str, db: AsyncSession = Depends(get_db)) -> TaskOut:
  return _task_out(await TaskService(db).get_task(task_id))


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(task_id: str, payload: TaskUpdateIn, db: AsyncSession = Depends(get_db)) -> TaskOut:
  t = await TaskService(db).update_task(task_id, payload)
  await db.commit()
  return _task_out(t)


@router.delete("/{task_id}", response_model=MessageOut)
async def delete_task(task_id: str, db: AsyncSession = Depends(get_db)) -> MessageOut:
  await TaskService(db).delete_task(task_id)
  await db.commit()
  return MessageOut(status=status.HTTP_200_OK, message="Task successfully deleted")


@router.post("/{task_id}/restore", response_model=TaskOut)
async def restore_task(task_id: str, db: AsyncSession = Depends(get_db)) -> TaskOut:
  t = await TaskService(db).restore_task(task_id)
  await db.commit()
  return _task_out(t)


@router.patch("/{task_id}/complete", response_model=TaskOut)
async def complete_task(task_id: str, db: AsyncSession = Depends(get_db)) -> TaskOut:
  t = await TaskService(db).complete_task(task_id)
  await db.commit()
  return _task_out(t)


@router.patch("/{task_id}/status", response_model=TaskOut)
async def update_task_status(task_id: str, payload: TaskStatusUpdateIn, db: AsyncSession = Depends(get_db)) -> TaskOut:
  t = await TaskService(db).update_status(task_id, payload.status, payload.boardOrder)
  await db.commit()
  return _task_out(t)
