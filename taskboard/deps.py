from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db import SessionLocal


async def get_db() -> AsyncSession:
  async with SessionLocal() as session:
    yield session
