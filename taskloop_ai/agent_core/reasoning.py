from __future__ import annotations

"""Reasoning engine interface and the pydantic-ai adapter.

The reasoning engine is the LLM collaborator. Given the conversation so far
and a ``NextRequestDirective`` it picks exactly one offered action and its
arguments. How it decides is not the orchestrator's concern.
"""

import logging
from typing import Any, Dict, List, Protocol, Sequence, Type

from pydantic_ai import Agent, ToolOutput

from .capabilities.definitions import ActionArgs
from .catalog import DEFAULT_CATALOG, ActionCatalog
from .prompts import AGENT_SYSTEM_PROMPT
from .schemas.domain import ActionProposal, ChatMessage, NextRequestDirective

logger = logging.getLogger(__name__)


class ReasoningEngine(Protocol):
    """Chooses the next action."""

    async def propose(self, messages: Sequence[ChatMessage], directive: NextRequestDirective) -> ActionProposal: ...


def render_messages(messages: Sequence[ChatMessage]) -> str:
    """Flatten the chat history into the user prompt."""
    if not messages:
        return "Continue."
    lines = []
    for m in messages:
        who = f"{m.role.value}:{m.name}" if m.name else m.role.value
        lines.append(f"[{who}] {m.content}")
    return "\n\n".join(lines)


class PydanticAIReasoningEngine:
    """Reasoning engine backed by a pydantic-ai ``Agent``.

    Each offered action becomes an output tool named after the action whose
    schema is the action's argument model, so the model has to answer with
    exactly one action call. A fresh agent is built per call because the
    instruction text changes every iteration.
    """

    def __init__(
        self,
        *,
        model: Any,
        catalog: ActionCatalog = DEFAULT_CATALOG,
        system_prompt: str = AGENT_SYSTEM_PROMPT,
    ) -> None:
        self._model = model
        self._catalog = catalog
        self._system_prompt = system_prompt

    def _outputs(self, directive: NextRequestDirective) -> tuple[List[ToolOutput], Dict[Type[ActionArgs], str]]:
        outputs: List[ToolOutput] = []
        names: Dict[Type[ActionArgs], str] = {}
        for name in sorted(directive.offered_actions):
            spec = self._catalog.get(name)
            outputs.append(ToolOutput(spec.args_model, name=spec.name, description=spec.description))
            names[spec.args_model] = spec.name
        return outputs, names

    async def propose(self, messages: Sequence[ChatMessage], directive: NextRequestDirective) -> ActionProposal:
        if not directive.offered_actions:
            raise ValueError("directive offers no actions")

        outputs, names = self._outputs(directive)
        agent: Agent = Agent(
            self._model,
            output_type=outputs,
            system_prompt=[self._system_prompt, directive.instruction_text],
        )
        result = await agent.run(render_messages(messages))
        output = result.output
        action = names[type(output)]
        logger.debug(f"reasoning engine chose {action}")
        return ActionProposal(action=action, arguments=output.model_dump())
