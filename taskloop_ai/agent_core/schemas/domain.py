from __future__ import annotations

"""Domain models shared by the orchestrator loop.

These are plain pydantic value objects. Everything that crosses a loop stage
(outcomes, directives, suspension requests, session state) is frozen; the
only mutable records are the persisted ``SessionRecord`` rows.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import Field

from .base import BaseSchema, FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ActionCategory(str, Enum):
    new_task = "NEW_TASK"
    question = "QUESTION"
    action = "ACTION"
    completion = "COMPLETION"


class ActionName(str, Enum):
    new_task = "new_task"
    ask_for_clarification = "ask_for_clarification"
    confirm_action = "confirm_action"
    read_file = "read_file"
    list_files = "list_files"
    search_files = "search_files"
    write_to_file = "write_to_file"
    attempt_completion = "attempt_completion"


class SuspensionKind(str, Enum):
    task_confirmation = "task_confirmation"
    clarification = "clarification"
    action_confirmation = "action_confirmation"
    satisfaction_check = "satisfaction_check"


class MessageRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"
    tool = "tool"


class SessionState(FrozenSchema):
    """Context store for one task thread.

    ``context_history`` is chronological; entries are only ever appended or the
    whole list is cleared. ``current_task`` is set while a confirmed task is
    active.
    """

    context_history: List[str] = Field(default_factory=list)
    current_task: Optional[str] = None

    def append(self, entry: str, *, current_task: Optional[str] = None) -> SessionState:
        """Return a copy with ``entry`` appended, optionally replacing the current task."""
        return SessionState(
            context_history=[*self.context_history, entry],
            current_task=current_task if current_task is not None else self.current_task,
        )


class TaskConfirmed(FrozenSchema):
    kind: Literal["confirmed"] = "confirmed"
    task_id: str
    label: str

    def render(self) -> str:
        return f'NEW TASK CONFIRMED: {self.task_id} - "{self.label}"'


class TaskFeedback(FrozenSchema):
    kind: Literal["feedback"] = "feedback"
    feedback: str

    def render(self) -> str:
        return f'TASK FEEDBACK: "{self.feedback}"'


class TaskDeclined(FrozenSchema):
    kind: Literal["declined"] = "declined"

    def render(self) -> str:
        return "TASK DECLINED: no feedback given"


TaskDecision = Annotated[Union[TaskConfirmed, TaskFeedback, TaskDeclined], Field(discriminator="kind")]


class ActionOutcome(FrozenSchema):
    """Result of one loop iteration, consumed by a single ``transition`` call.

    ``task_decision`` is only set for NEW_TASK actions. When it is absent the
    transition engine falls back to parsing ``result_text``.
    """

    action: str
    result_text: str = ""
    task_decision: Optional[TaskDecision] = None


class NextRequestDirective(FrozenSchema):
    instruction_text: str
    offered_actions: FrozenSet[str] = Field(default_factory=frozenset)
    force_action_use: bool = True

    @property
    def terminal(self) -> bool:
        """True when nothing may be offered to the reasoning engine any more."""
        return not self.offered_actions and not self.force_action_use


class SuspensionRequest(FrozenSchema):
    """What the human-interaction channel needs to ask for a reply.

    ``details`` carries what the suspending action wants shown before the
    prompt (the proposed task, the question, the completion summary).
    """

    kind: SuspensionKind
    label: str
    action: str
    details: Dict[str, str] = Field(default_factory=dict)

    @property
    def expects_yes_no(self) -> bool:
        return "y/N" in self.label


def normalize_reply(reply: str) -> str:
    """Lower-cased yes/no reply without surrounding whitespace or trailing ``.``/``!``."""
    return (reply or "").strip().rstrip(".!").strip().lower()


class ActionProposal(FrozenSchema):
    """The single action the reasoning engine chose, with its raw arguments."""

    action: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ChatMessage(BaseSchema):
    role: MessageRole
    content: str
    name: Optional[str] = None


class SessionRecord(BaseSchema):
    """Everything persisted for a thread between graph invocations.

    ``awaiting_suspension`` together with ``thread_id`` is the resume token: a
    thread may only be resumed while it is set.
    """

    thread_id: str
    state: SessionState = Field(default_factory=SessionState)
    messages: List[ChatMessage] = Field(default_factory=list)
    pending_action: Optional[ActionProposal] = None
    awaiting_suspension: Optional[SuspensionRequest] = None
    iterations: int = 0
    updated_at: datetime = Field(default_factory=_utc_now)


class RunConfig(BaseSchema):
    thread_id: str
    recursion_limit: int = Field(default=100, ge=1)


class RunResult(BaseSchema):
    thread_id: str
    messages: List[ChatMessage] = Field(default_factory=list)
    state: SessionState = Field(default_factory=SessionState)
    directive: Optional[NextRequestDirective] = None
    suspension: Optional[SuspensionRequest] = None
    iterations: int = 0
    terminated: bool = False

    @property
    def last_message(self) -> Optional[ChatMessage]:
        return self.messages[-1] if self.messages else None
