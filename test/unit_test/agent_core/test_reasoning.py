from __future__ import annotations

from typing import List

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, SystemPromptPart, ToolCallPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel as StubModel

from taskloop_ai.agent_core.catalog import DEFAULT_CATALOG
from taskloop_ai.agent_core.prompts import AGENT_SYSTEM_PROMPT
from taskloop_ai.agent_core.reasoning import PydanticAIReasoningEngine, render_messages
from taskloop_ai.agent_core.runtime.transition import build_directive, terminal_directive
from taskloop_ai.agent_core.schemas.domain import (
    ChatMessage,
    MessageRole,
    NextRequestDirective,
    SessionState,
)


def _messages() -> List[ChatMessage]:
    return [
        ChatMessage(role=MessageRole.user, content="Find all Python files"),
        ChatMessage(role=MessageRole.tool, name="list_files", content="Files in . (1 items):\n  app.py"),
    ]


class TestRenderMessages:
    def test_roles_and_names(self):
        text = render_messages(_messages())

        assert text.startswith("[user] Find all Python files")
        assert "[tool:list_files] Files in ." in text

    def test_empty_history(self):
        assert render_messages([]) == "Continue."


class TestPydanticAIReasoningEngine:
    async def test_test_model_picks_an_offered_action(self):
        engine = PydanticAIReasoningEngine(model=StubModel())
        directive = build_directive(SessionState())

        proposal = await engine.propose(_messages(), directive)

        assert proposal.action in directive.offered_actions
        DEFAULT_CATALOG.get(proposal.action).args_model.model_validate(proposal.arguments)

    async def test_single_offered_action(self):
        engine = PydanticAIReasoningEngine(model=StubModel(custom_output_args={"filepath": "src/app.py"}))
        directive = NextRequestDirective(instruction_text="read it", offered_actions=frozenset({"read_file"}))

        proposal = await engine.propose(_messages(), directive)

        assert proposal.action == "read_file"
        assert proposal.arguments == {"filepath": "src/app.py"}

    async def test_actions_are_output_tools_and_instruction_is_system_prompt(self):
        seen: dict = {}

        def respond(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
            seen["tools"] = sorted(t.name for t in info.output_tools)
            seen["system"] = [
                p.content for m in messages for p in getattr(m, "parts", []) if isinstance(p, SystemPromptPart)
            ]
            return ModelResponse(
                parts=[ToolCallPart(tool_name="ask_for_clarification", args={"question": "Which bug?"})]
            )

        engine = PydanticAIReasoningEngine(model=FunctionModel(respond))
        directive = build_directive(SessionState())

        proposal = await engine.propose([ChatMessage(role=MessageRole.user, content="Fix the bug")], directive)

        assert seen["tools"] == sorted(DEFAULT_CATALOG.names())
        assert seen["system"] == [AGENT_SYSTEM_PROMPT, directive.instruction_text]
        assert proposal.action == "ask_for_clarification"
        assert proposal.arguments == {"question": "Which bug?", "context": ""}

    async def test_terminal_directive_rejected(self):
        engine = PydanticAIReasoningEngine(model=StubModel())

        with pytest.raises(ValueError):
            await engine.propose(_messages(), terminal_directive())
