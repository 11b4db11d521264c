"""Task-thread orchestrator loop, action catalog and session persistence.

Design overview
---------------

The loop is a strict cycle of *choose* and *apply*:

- The reasoning engine chooses exactly one action per iteration from the
  ``ActionCatalog``. Every action belongs to one of four categories:

  - ``NEW_TASK``: propose a task; the human confirms it or gives feedback.
  - ``QUESTION``: ask the human something.
  - ``ACTION``: do work now (read, list, search, write files).
  - ``COMPLETION``: present results and ask whether the human is satisfied.

- Applying an action produces an ``ActionOutcome`` which the pure
  ``transition`` function folds into the thread's ``SessionState`` together
  with the directive for the next request. The loop ends only when a
  completion is answered affirmatively.

Human-facing actions suspend the thread; ``AgentEngine.resume`` continues it
with the human's reply.

Typical usage
-------------

Most applications should use ``agent_core.service.AgentService``:

1. Build ``EngineDeps`` with ``agent_core.factory.build_engine_deps``.
2. Pick a ``HumanChannel`` (``ConsoleChannel`` for terminals).
3. Call ``AgentService.run(initial_messages, RunConfig(thread_id=...))``.
"""

from .catalog import DEFAULT_CATALOG, ActionCatalog, ActionSpec, classify
from .errors import (
    AgentCoreError,
    LoopBoundExceededError,
    SuspensionStateError,
    UnknownActionError,
)
from .schemas.domain import (
    ActionCategory,
    ActionOutcome,
    ChatMessage,
    NextRequestDirective,
    RunConfig,
    RunResult,
    SessionState,
    SuspensionRequest,
)

__all__ = [
    "ActionCatalog",
    "ActionSpec",
    "DEFAULT_CATALOG",
    "classify",
    # Errors
    "AgentCoreError",
    "LoopBoundExceededError",
    "SuspensionStateError",
    "UnknownActionError",
    # Domain types
    "ActionCategory",
    "ActionOutcome",
    "ChatMessage",
    "NextRequestDirective",
    "RunConfig",
    "RunResult",
    "SessionState",
    "SuspensionRequest",
]
