from __future__ import annotations

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

_TMP = Path(tempfile.mkdtemp(prefix="taskboard-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP / 'taskboard_test.db'}")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from taskboard.config import settings
from taskboard.db import SessionLocal, create_tables, drop_tables, engine
from taskboard.main import app
from taskboard.models import Task
from taskboard.schemas import TaskCreateIn
from taskboard.tasks.service import TaskService


@pytest.fixture(scope="session")
def anyio_backend() -> str:
  return "asyncio"


async def _reset_db() -> None:
  await drop_tables()
  await create_tables()
  await engine.dispose()


@pytest.fixture
async def fresh_db() -> None:
  db_name = settings.database_url.rsplit("/", 1)[-1]
  if "test" not in db_name:
    raise RuntimeError(
      "Refusing to run destructive tests against non-test DB. "
      "Set DATABASE_URL to a *_test database (e.g. taskboard_test)."
    )
  await _reset_db()
  yield
  await engine.dispose()


@pytest.fixture
async def db(fresh_db):
  async with SessionLocal() as session:
    yield session


@pytest.fixture
async def client(fresh_db) -> AsyncClient:
  transport = ASGITransport(app=app)
  async with AsyncClient(transport=transport, base_url="http://localhost") as c:
    yield c


def in_days(days: float) -> datetime:
  return datetime.now(timezone.utc) + timedelta(days=days)


async def make_task(db, title: str = "Task", **fields) -> Task:
  t = await TaskService(db).create_task(TaskCreateIn(title=title, **fields))
  await db.commit()
  return t


async def api_create(client: AsyncClient, title: str = "Task", **fields) -> dict:
  payload = {"title": title, **fields}
  res = await client.post("/api/tasks", json=payload)
  assert res.status_code == 201, res.text
  return res.json()
