from __future__ import annotations

"""Suspension protocol.

A thread is either RUNNING or SUSPENDED. Choosing a suspending action moves it
to SUSPENDED: the engine records the ``SuspensionRequest`` and the pending
action on the thread's ``SessionRecord`` and stops calling the reasoning
engine. The thread id plus that ``awaiting_suspension`` marker is the resume
token.

Resuming takes the human's reply, clears the marker and lets the suspending
capability turn the reply into the action's ``ActionOutcome``, which then goes
through the transition engine like any other outcome.

The human side is a ``HumanChannel``. ``collect_reply`` implements the
re-prompt rule shared by channels: an empty reply is asked again, except for
yes/no prompts where it means "N".
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, Tuple

from ..capabilities.base import CapabilityResult
from ..errors import SuspensionStateError
from ..schemas.domain import (
    ActionOutcome,
    ActionProposal,
    SessionRecord,
    SuspensionKind,
    SuspensionRequest,
)

logger = logging.getLogger(__name__)

EMPTY_REPLY_NOTICE = "Please provide a value. Empty responses are not allowed."
DEFAULT_NEGATIVE_REPLY = "N"


class HumanChannel(Protocol):
    """Obtains a free-text reply from a human for a suspension request."""

    async def prompt(self, request: SuspensionRequest) -> str: ...


async def collect_reply(
    request: SuspensionRequest,
    ask: Callable[[str], Awaitable[str]],
    notify: Optional[Callable[[str], None]] = None,
) -> str:
    """Ask until a non-empty reply arrives; empty means ``"N"`` for yes/no prompts."""
    while True:
        response = await ask(request.label)
        if response.strip():
            return response
        if request.expects_yes_no:
            return DEFAULT_NEGATIVE_REPLY
        if notify is not None:
            notify(EMPTY_REPLY_NOTICE)


def suspend(record: SessionRecord, *, proposal: ActionProposal, request: SuspensionRequest) -> SessionRecord:
    """Mark ``record`` as waiting on ``request`` for ``proposal``."""
    logger.info(f"thread {record.thread_id} suspended on {proposal.action} ({request.kind.value})")
    return record.model_copy(update={"pending_action": proposal, "awaiting_suspension": request})


def begin_resume(record: Optional[SessionRecord], *, thread_id: str) -> Tuple[SessionRecord, ActionProposal]:
    """Validate the resume token and clear it.

    Returns:
        The cleared record and the action that was waiting.

    Raises:
        SuspensionStateError: If the thread is unknown or not suspended.
    """
    if record is None:
        raise SuspensionStateError(f"no session for thread {thread_id!r}")
    if record.awaiting_suspension is None or record.pending_action is None:
        raise SuspensionStateError(f"thread {thread_id!r} is not awaiting a reply")
    proposal = record.pending_action
    logger.info(f"thread {thread_id} resumed on {proposal.action}")
    return record.model_copy(update={"awaiting_suspension": None}), proposal


def outcome_from_reply(proposal: ActionProposal, result: CapabilityResult) -> ActionOutcome:
    return ActionOutcome(action=proposal.action, result_text=result.output, task_decision=result.task_decision)


_HEADINGS = {
    SuspensionKind.task_confirmation: "NEW TASK IDENTIFIED",
    SuspensionKind.clarification: "QUESTION",
    SuspensionKind.action_confirmation: "CONFIRMATION NEEDED",
    SuspensionKind.satisfaction_check: "ATTEMPTING COMPLETION",
}


class ConsoleChannel:
    """Terminal channel: prints the request details, then reads a line.

    ``reader`` is called in a worker thread so a blocking ``input`` does not
    stall the event loop.
    """

    def __init__(
        self,
        reader: Callable[[str], str] = input,
        writer: Callable[[str], None] = print,
    ) -> None:
        self._reader = reader
        self._writer = writer

    def _present(self, request: SuspensionRequest) -> None:
        self._writer(f"\n{_HEADINGS.get(request.kind, request.kind.value.upper())}:")
        for key, value in request.details.items():
            if value:
                self._writer(f"  {key.replace('_', ' ').title()}: {value}")

    async def _ask(self, label: str) -> str:
        return await asyncio.to_thread(self._reader, label)

    async def prompt(self, request: SuspensionRequest) -> str:
        self._present(request)
        return await collect_reply(request, self._ask, self._writer)
