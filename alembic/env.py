from __future__ import annotations

import asyncio

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from taskboard.config import settings
from taskboard.models import Base

target_metadata = Base.metadata


def run_migrations_offline() -> None:
  context.configure(url=settings.database_url, target_metadata=target_metadata, literal_binds=True)
  with context.begin_transaction():
    context.run_migrations()


def _run_sync(connection) -> None:
  context.configure(connection=connection, target_metadata=target_metadata)
  with context.begin_transaction():
    context.run_migrations()


async def run_migrations_online() -> None:
  engine = create_async_engine(settings.database_url)
  async with engine.connect() as conn:
    await conn.run_sync(_run_sync)
  await engine.dispose()


if context.is_offline_mode():
  run_migrations_offline()
else:
  asyncio.run(run_migrations_online())
