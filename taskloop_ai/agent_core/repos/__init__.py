"""Session persistence for the orchestrator loop.

The runtime reads and writes one ``SessionRecord`` per task thread through the
``SessionRepository`` protocol. Two implementations ship:

- ``InMemorySessionRepository`` for single-process runs and tests,
- ``SqlSessionRepository`` (async SQLAlchemy, in ``repos.sql``) when session
  state must survive process restarts.
"""

from .interfaces import SessionRepository
from .memory import InMemorySessionRepository

__all__ = [
    "SessionRepository",
    "InMemorySessionRepository",
]
