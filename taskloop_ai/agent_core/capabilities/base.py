from __future__ import annotations

"""Capability protocols and execution data models.

A capability is the concrete implementation behind one catalog action.

- ``Capability`` implements ACTION-category work. It runs to completion and
  returns text; failures are reported as ``Error: ...`` text, never raised.
- ``SuspendingCapability`` implements NEW_TASK, QUESTION and COMPLETION
  actions. It does not run immediately: it describes what to ask the human
  (``suspension_request``) and later turns the human's reply into a result
  (``on_reply``).

Arguments arrive already validated against the action's argument model.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

from ..schemas.domain import SessionState, SuspensionRequest, TaskDecision
from .definitions import ActionArgs


@dataclass(frozen=True)
class CapabilityContext:
    """Execution context passed to capability implementations.

    Attributes
    ----------
    thread_id:
        The task thread the action runs for.
    state:
        The thread's session state before this action's outcome is applied.
    deps:
        Runtime dependencies bundled in ``EngineDeps``.
    """

    thread_id: str
    state: SessionState
    deps: Any = None


@dataclass(frozen=True)
class CapabilityResult:
    """Structured capability execution result.

    ``output`` is the result text the transition engine sees. ``task_decision``
    is only set by the NEW_TASK capability.
    """

    ok: bool
    output: str
    task_decision: Optional[TaskDecision] = None


class Capability(Protocol):
    """Protocol for immediately executed capabilities."""

    name: str

    async def execute(self, ctx: CapabilityContext, *, args: ActionArgs) -> CapabilityResult: ...


class SuspendingCapability(Protocol):
    """Protocol for capabilities that wait on a human reply."""

    name: str

    def suspension_request(self, ctx: CapabilityContext, *, args: ActionArgs) -> SuspensionRequest: ...

    async def on_reply(self, ctx: CapabilityContext, *, args: ActionArgs, reply: str) -> CapabilityResult: ...


AnyCapability = Union[Capability, SuspendingCapability]
