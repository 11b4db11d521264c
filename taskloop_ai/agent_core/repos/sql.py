from __future__ import annotations

"""SQLAlchemy async session store.

Usage
-----

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (for tests/dev).
- Create a session factory with ``create_sessionmaker``.
- Build the repository with ``SqlSessionRepository(session_factory)``.

Each repository method opens an ``AsyncSession``, performs its operation, and
commits, so a saved record is durable when ``save`` returns.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..schemas.domain import SessionRecord
from .interfaces import SessionRepository
from .models import Base, SessionRow


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Postgres URLs are rewritten to use the ``asyncpg`` driver; other URLs
    (e.g. ``sqlite+aiosqlite://``) are used as given.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    if url.startswith("postgresql+asyncpg://"):
        return create_async_engine(url, pool_pre_ping=True)
    return create_async_engine(url)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@dataclass(frozen=True)
class SqlSessionRepository(SessionRepository):
    """SQL implementation of ``SessionRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def get(self, thread_id: str) -> Optional[SessionRecord]:
        async with self.session_factory() as s:
            row = await s.get(SessionRow, thread_id)
            if row is None:
                return None
            return SessionRecord.model_validate(row.payload)

    async def save(self, record: SessionRecord) -> None:
        """
        Insert or replace the row for ``record.thread_id``.

        Args:
            record: The full record to persist.
        """
        now = datetime.now(timezone.utc)
        payload = record.model_copy(update={"updated_at": now}).model_dump(mode="json")
        async with self.session_factory() as s:
            row = await s.get(SessionRow, record.thread_id)
            if row is None:
                s.add(
                    SessionRow(
                        thread_id=record.thread_id,
                        payload=payload,
                        awaiting=record.awaiting_suspension is not None,
                        updated_at=now,
                    )
                )
            else:
                row.payload = payload
                row.awaiting = record.awaiting_suspension is not None
                row.updated_at = now
            await s.commit()

    async def delete(self, thread_id: str) -> None:
        async with self.session_factory() as s:
            await s.execute(delete(SessionRow).where(SessionRow.thread_id == thread_id))
            await s.commit()

    async def list_awaiting(self) -> list[str]:
        """Thread ids currently suspended on a human reply."""
        async with self.session_factory() as s:
            result = await s.execute(select(SessionRow.thread_id).where(SessionRow.awaiting.is_(True)))
            return [r for (r,) in result.all()]
