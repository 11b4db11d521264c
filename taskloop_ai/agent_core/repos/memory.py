from __future__ import annotations

"""In-process session store.

The default store for single-process use and tests. Records are deep-copied
on the way in and out so callers cannot mutate stored state.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from ..schemas.domain import SessionRecord
from .interfaces import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Dict-backed ``SessionRepository``."""

    def __init__(self) -> None:
        self._records: Dict[str, SessionRecord] = {}

    async def get(self, thread_id: str) -> Optional[SessionRecord]:
        record = self._records.get(thread_id)
        return record.model_copy(deep=True) if record is not None else None

    async def save(self, record: SessionRecord) -> None:
        self._records[record.thread_id] = record.model_copy(
            deep=True, update={"updated_at": datetime.now(timezone.utc)}
        )

    async def delete(self, thread_id: str) -> None:
        self._records.pop(thread_id, None)

    def thread_ids(self) -> list[str]:
        return list(self._records)
