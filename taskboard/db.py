from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from taskboard.config import settings
from taskboard.models import Base

engine: AsyncEngine = create_async_engine(settings.database_url, echo=settings.sql_echo)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def create_tables() -> None:
  async with engine.begin() as conn:
    await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
  async with engine.begin() as conn:
    await conn.run_sync(Base.metadata.drop_all)
