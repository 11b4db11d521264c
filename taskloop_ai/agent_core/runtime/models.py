from __future__ import annotations

"""Runtime dependency bundle and LangGraph state types.

The runtime engine is designed to be dependency-injected.

- ``EngineDeps`` collects the store, registries and collaborators the engine
  needs.
- ``_GraphState`` is the state passed between LangGraph nodes during one graph
  invocation. It only carries the thread id, the bound and per-step scratch
  values; the durable per-thread data lives in the ``SessionRecord`` held by
  ``EngineDeps.sessions``.
"""

from dataclasses import dataclass
from typing import NotRequired, Optional, Required, TypedDict

from ..capabilities import CapabilityRegistry
from ..catalog import DEFAULT_CATALOG, ActionCatalog
from ..reasoning import ReasoningEngine
from ..repos import SessionRepository
from ..schemas.domain import (
    ActionOutcome,
    ActionProposal,
    NextRequestDirective,
    SuspensionRequest,
)


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``AgentEngine``.

    - ``sessions``: per-thread session store.
    - ``capabilities``: action name → implementation.
    - ``reasoning``: the reasoning engine that picks actions.
    - ``catalog``: action categories; must agree with ``capabilities``.
    - ``strict_affirmative``: only ``y``/``yes`` satisfies a completion.
    """

    sessions: SessionRepository
    capabilities: CapabilityRegistry
    reasoning: ReasoningEngine
    catalog: ActionCatalog = DEFAULT_CATALOG
    strict_affirmative: bool = False


class _GraphState(TypedDict):
    """LangGraph state for one invocation.

    Required keys:

    - ``thread_id``: the task thread.
    - ``limit``: maximum reasoning-engine proposals for the run.

    Optional keys:

    - ``_resume_reply`` / ``_proposal``: set when the invocation resumes a
      suspension; ``_proposal`` also carries the freshly proposed action.
    - ``_outcome``: the outcome waiting for the transition engine.
    - ``_directive``: the directive for the next reasoning-engine call.
    - ``_suspension``: set when the invocation stopped on a suspension.
    - ``_finished``: set when the transition engine signalled termination.
    """

    thread_id: Required[str]
    limit: Required[int]
    _resume_reply: NotRequired[Optional[str]]
    _proposal: NotRequired[Optional[ActionProposal]]
    _outcome: NotRequired[Optional[ActionOutcome]]
    _directive: NotRequired[Optional[NextRequestDirective]]
    _suspension: NotRequired[Optional[SuspensionRequest]]
    _finished: NotRequired[bool]
