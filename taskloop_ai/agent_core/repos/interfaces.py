from __future__ import annotations

"""Repository interface contracts.

The runtime depends on this Protocol instead of a concrete store. Session
records are keyed by thread identifier; distinct threads never share a record.

Contract guidelines
-------------------

- All methods are async.
- ``save`` replaces the whole record for its thread id.
- ``get`` returns ``None`` for unknown threads; ``delete`` of an unknown thread
  is a no-op.
- Records handed out must not alias the stored copy.
"""

from typing import Optional, Protocol

from ..schemas.domain import SessionRecord


class SessionRepository(Protocol):
    """Persist the per-thread session record across loop iterations and suspensions."""

    async def get(self, thread_id: str) -> Optional[SessionRecord]:
        """
        Retrieve the record for a thread.

        Args:
            thread_id: The task thread identifier.

        Returns:
            The SessionRecord if found, else None.
        """
        ...

    async def save(self, record: SessionRecord) -> None:
        """
        Create or replace the record for ``record.thread_id``.

        Args:
            record: The full record to persist.
        """
        ...

    async def delete(self, thread_id: str) -> None:
        """
        Drop a thread's record.

        Args:
            thread_id: The task thread identifier.
        """
        ...
