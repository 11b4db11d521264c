from __future__ import annotations

"""Transition engine.

``transition`` maps ``(prior SessionState, ActionOutcome)`` to the next
``SessionState`` and the ``NextRequestDirective`` for the following reasoning
engine call. It is a pure function: no I/O, no hidden counters, and the same
inputs always produce equal outputs.

Rules, in order:

1. A COMPLETION outcome whose reply is affirmative, on a thread that has at
   least one context entry, clears the state and yields the terminal
   directive. This is the only way a run ends normally.
2. A NEW_TASK outcome that carries a confirmation sets ``current_task`` and
   records ``Started task: <label>``; one that carries feedback records
   ``Task feedback: <feedback>``.
3. Anything else records ``<action>: encountered error`` or
   ``<action>: completed successfully`` depending on the error markers in the
   result text.
"""

import logging
import re
from typing import FrozenSet, Optional, Tuple

from ..catalog import DEFAULT_CATALOG, ActionCatalog
from ..prompts import (
    FOCUS_NEW_TASK,
    FOCUS_ON_TASK,
    HISTORY_SEPARATOR,
    INSTRUCTION_TEMPLATE,
    NO_ACTIVE_TASK,
    TASK_COMPLETE_INSTRUCTION,
)
from ..schemas.domain import (
    ActionCategory,
    ActionOutcome,
    NextRequestDirective,
    SessionState,
    TaskConfirmed,
    TaskDecision,
    TaskFeedback,
    normalize_reply,
)

logger = logging.getLogger(__name__)

CONFIRMED_PATTERN = re.compile(r'NEW TASK CONFIRMED: (task_\d+) - "([^"]+)"')
FEEDBACK_PATTERN = re.compile(r'TASK FEEDBACK: "([^"]+)"')

ERROR_MARKERS: Tuple[str, ...] = ("Error:", "does not exist")

AFFIRMATIVE_TOKENS: FrozenSet[str] = frozenset({"y", "yes"})


def is_affirmative(reply: str, *, strict: bool = False) -> bool:
    """Whether a yes/no reply means "yes".

    The lenient default accepts any reply containing the letter ``y`` (so
    "maybe" counts). ``strict`` only accepts ``y``/``yes``, ignoring trailing
    ``.`` or ``!``.
    """
    normalized = normalize_reply(reply)
    if strict:
        return normalized in AFFIRMATIVE_TOKENS
    return "y" in normalized


def has_error_marker(result_text: str) -> bool:
    return any(marker in result_text for marker in ERROR_MARKERS)


def parse_task_decision(result_text: str) -> Optional[TaskDecision]:
    """Recover a NEW_TASK decision from its rendered text, if it has one of the two known shapes."""
    text = result_text or ""
    confirmed = CONFIRMED_PATTERN.search(text)
    if confirmed:
        return TaskConfirmed(task_id=confirmed.group(1), label=confirmed.group(2))
    feedback = FEEDBACK_PATTERN.search(text)
    if feedback:
        return TaskFeedback(feedback=feedback.group(1))
    return None


def terminal_directive() -> NextRequestDirective:
    return NextRequestDirective(
        instruction_text=TASK_COMPLETE_INSTRUCTION,
        offered_actions=frozenset(),
        force_action_use=False,
    )


def build_directive(state: SessionState, catalog: ActionCatalog = DEFAULT_CATALOG) -> NextRequestDirective:
    """Directive for a non-terminal iteration over ``state``."""
    if state.current_task:
        focus = FOCUS_ON_TASK.format(task=state.current_task)
    else:
        focus = FOCUS_NEW_TASK
    instruction = INSTRUCTION_TEMPLATE.format(
        current_task=state.current_task or NO_ACTIVE_TASK,
        context_history=HISTORY_SEPARATOR.join(state.context_history),
        focus=focus,
    )
    return NextRequestDirective(
        instruction_text=instruction,
        offered_actions=catalog.names(),
        force_action_use=True,
    )


def _generic_entry(outcome: ActionOutcome) -> str:
    if has_error_marker(outcome.result_text):
        return f"{outcome.action}: encountered error"
    return f"{outcome.action}: completed successfully"


def transition(
    prior: SessionState,
    outcome: ActionOutcome,
    *,
    catalog: ActionCatalog = DEFAULT_CATALOG,
    strict_affirmative: bool = False,
) -> Tuple[SessionState, NextRequestDirective]:
    """Compute the next session state and request directive.

    Raises:
        UnknownActionError: If ``outcome.action`` is not in ``catalog``.
    """
    category = catalog.category_of(outcome.action)

    if (
        category == ActionCategory.completion
        and prior.context_history
        and is_affirmative(outcome.result_text, strict=strict_affirmative)
    ):
        logger.debug(f"transition: {outcome.action} satisfied, clearing {len(prior.context_history)} entries")
        return SessionState(), terminal_directive()

    nxt: Optional[SessionState] = None
    if category == ActionCategory.new_task:
        decision = outcome.task_decision or parse_task_decision(outcome.result_text)
        if isinstance(decision, TaskConfirmed):
            nxt = prior.append(f"Started task: {decision.label}", current_task=decision.label)
        elif isinstance(decision, TaskFeedback):
            nxt = prior.append(f"Task feedback: {decision.feedback}")

    if nxt is None:
        nxt = prior.append(_generic_entry(outcome))

    logger.debug(f"transition: {outcome.action} ({category.value}) -> {nxt.context_history[-1]!r}")
    return nxt, build_directive(nxt, catalog)
