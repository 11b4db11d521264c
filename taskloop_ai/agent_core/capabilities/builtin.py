from __future__ import annotations

"""Built-in human-interaction capabilities.

These back the NEW_TASK, QUESTION and COMPLETION actions. None of them does
any work when chosen; each describes the prompt to show the human and turns
the human's reply into the action result on resume.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from ..schemas.domain import (
    ActionName,
    SuspensionKind,
    SuspensionRequest,
    TaskConfirmed,
    TaskDeclined,
    TaskFeedback,
    normalize_reply,
)
from .base import CapabilityContext, CapabilityResult
from .definitions import (
    AskForClarificationArgs,
    AttemptCompletionArgs,
    ConfirmActionArgs,
    NewTaskArgs,
)

logger = logging.getLogger(__name__)

TASK_CONFIRMATION_LABEL = "Is this task correct? (y/N, or type feedback): "
CLARIFICATION_LABEL = "Please provide clarification: "
ACTION_CONFIRMATION_LABEL = "Proceed with this action? (y/N): "
SATISFACTION_LABEL = "Are you satisfied with these results? (y/N): "

_YES = frozenset({"y", "yes"})
_NO = frozenset({"", "n", "no"})


def _unquote(text: str) -> str:
    # the rendered decision shapes delimit values with double quotes
    return text.strip().replace('"', "'")


@dataclass(frozen=True)
class NewTaskCapability:
    """
    Propose a task and ask the human to confirm it.

    A plain yes confirms the task, a plain no (or an empty reply) declines it,
    and any other reply is taken as feedback on the proposal.
    """

    name: str = ActionName.new_task.value

    def suspension_request(self, ctx: CapabilityContext, *, args: NewTaskArgs) -> SuspensionRequest:
        logger.info(f"new_task proposed: {args.task_description}")
        return SuspensionRequest(
            kind=SuspensionKind.task_confirmation,
            label=TASK_CONFIRMATION_LABEL,
            action=self.name,
            details={"task": args.task_description, "reasoning": args.reasoning},
        )

    async def on_reply(self, ctx: CapabilityContext, *, args: NewTaskArgs, reply: str) -> CapabilityResult:
        normalized = normalize_reply(reply)
        label = _unquote(args.task_description)
        if normalized in _YES and label:
            started = sum(1 for entry in ctx.state.context_history if entry.startswith("Started task: "))
            decision = TaskConfirmed(task_id=f"task_{started + 1}", label=label)
        elif normalized in _NO or normalized in _YES:
            decision = TaskDeclined()
        else:
            decision = TaskFeedback(feedback=_unquote(reply))
        return CapabilityResult(ok=True, output=decision.render(), task_decision=decision)


@dataclass(frozen=True)
class AskForClarificationCapability:
    """
    Ask the human a question. The reply is returned verbatim.
    """

    name: str = ActionName.ask_for_clarification.value

    def suspension_request(self, ctx: CapabilityContext, *, args: AskForClarificationArgs) -> SuspensionRequest:
        return SuspensionRequest(
            kind=SuspensionKind.clarification,
            label=CLARIFICATION_LABEL,
            action=self.name,
            details={"question": args.question, "context": args.context},
        )

    async def on_reply(self, ctx: CapabilityContext, *, args: AskForClarificationArgs, reply: str) -> CapabilityResult:
        return CapabilityResult(ok=True, output=reply)


@dataclass(frozen=True)
class ConfirmActionCapability:
    """
    Ask the human to approve a risky operation before it is attempted.
    """

    name: str = ActionName.confirm_action.value

    def suspension_request(self, ctx: CapabilityContext, *, args: ConfirmActionArgs) -> SuspensionRequest:
        return SuspensionRequest(
            kind=SuspensionKind.action_confirmation,
            label=ACTION_CONFIRMATION_LABEL,
            action=self.name,
            details={"action": args.action, "reason": args.reason},
        )

    async def on_reply(self, ctx: CapabilityContext, *, args: ConfirmActionArgs, reply: str) -> CapabilityResult:
        return CapabilityResult(ok=True, output=reply)


@dataclass(frozen=True)
class AttemptCompletionCapability:
    """
    Present results and ask whether the human is satisfied.

    The reply is returned verbatim; the transition engine decides whether it
    ends the run.
    """

    name: str = ActionName.attempt_completion.value

    def suspension_request(self, ctx: CapabilityContext, *, args: AttemptCompletionArgs) -> SuspensionRequest:
        details: Dict[str, str] = {"summary": args.summary, "details": args.details}
        if args.next_steps:
            details["next_steps"] = args.next_steps
        return SuspensionRequest(
            kind=SuspensionKind.satisfaction_check,
            label=SATISFACTION_LABEL,
            action=self.name,
            details=details,
        )

    async def on_reply(self, ctx: CapabilityContext, *, args: AttemptCompletionArgs, reply: str) -> CapabilityResult:
        return CapabilityResult(ok=True, output=reply)
