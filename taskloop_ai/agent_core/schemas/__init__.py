"""Pydantic schemas for the agent core."""

from .base import BaseSchema, FrozenSchema
from .domain import (
    ActionCategory,
    ActionName,
    ActionOutcome,
    ActionProposal,
    ChatMessage,
    MessageRole,
    NextRequestDirective,
    RunConfig,
    RunResult,
    SessionRecord,
    SessionState,
    SuspensionKind,
    SuspensionRequest,
    TaskConfirmed,
    TaskDeclined,
    TaskDecision,
    TaskFeedback,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "ActionCategory",
    "ActionName",
    "ActionOutcome",
    "ActionProposal",
    "ChatMessage",
    "MessageRole",
    "NextRequestDirective",
    "RunConfig",
    "RunResult",
    "SessionRecord",
    "SessionState",
    "SuspensionKind",
    "SuspensionRequest",
    "TaskConfirmed",
    "TaskDeclined",
    "TaskDecision",
    "TaskFeedback",
]
