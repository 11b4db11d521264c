from __future__ import annotations

"""Exception types raised by the orchestrator loop.

Only loop-level failures are exceptions. Action failures (missing files,
permission errors) never raise; capabilities encode them as ``Error: ...``
text and the transition engine records them as ordinary context entries.
"""

from typing import Optional

from .schemas.domain import SessionState


class AgentCoreError(Exception):
    """Base class for fatal orchestrator errors."""


class UnknownActionError(AgentCoreError, KeyError):
    """The reasoning engine chose an action that is not in the catalog."""

    def __init__(self, action: str) -> None:
        super().__init__(action)
        self.action = action

    def __str__(self) -> str:
        return f"unknown action: {self.action!r}"


class LoopBoundExceededError(AgentCoreError):
    """A run reached its recursion limit without a satisfied completion.

    The thread's session state is left in the store untouched; ``state`` is a
    copy of it for reporting.
    """

    def __init__(self, *, thread_id: str, limit: int, state: Optional[SessionState] = None) -> None:
        super().__init__(f"thread {thread_id!r} exceeded recursion limit of {limit} iterations")
        self.thread_id = thread_id
        self.limit = limit
        self.state = state or SessionState()


class SuspensionStateError(AgentCoreError, ValueError):
    """Resume was requested for a thread that is not waiting on a human reply."""
