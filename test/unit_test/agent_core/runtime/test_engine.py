from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pytest

from taskloop_ai.agent_core.capabilities.base import CapabilityContext, CapabilityResult
from taskloop_ai.agent_core.errors import (
    LoopBoundExceededError,
    SuspensionStateError,
    UnknownActionError,
)
from taskloop_ai.agent_core.factory import build_default_registry
from taskloop_ai.agent_core.repos import InMemorySessionRepository
from taskloop_ai.agent_core.runtime import engine as engine_module
from taskloop_ai.agent_core.runtime.engine import COMPLETION_MESSAGE, AgentEngine
from taskloop_ai.agent_core.runtime.models import EngineDeps
from taskloop_ai.agent_core.runtime.transition import build_directive, transition
from taskloop_ai.agent_core.schemas.domain import (
    ActionOutcome,
    ActionProposal,
    ChatMessage,
    MessageRole,
    NextRequestDirective,
    SessionState,
    SuspensionKind,
)
from taskloop_ai.core.config import ActionConfig


class _ScriptedReasoning:
    """Returns the scripted proposals in order and records what it was asked."""

    def __init__(self, proposals: List[ActionProposal], *, repeat_last: bool = False) -> None:
        self._proposals = list(proposals)
        self._repeat_last = repeat_last
        self.directives: List[NextRequestDirective] = []
        self.message_counts: List[int] = []

    async def propose(self, messages: Sequence[ChatMessage], directive: NextRequestDirective) -> ActionProposal:
        self.directives.append(directive)
        self.message_counts.append(len(messages))
        if self._repeat_last and len(self._proposals) == 1:
            return self._proposals[0]
        assert self._proposals, "reasoning engine called more often than scripted"
        return self._proposals.pop(0)

    @property
    def calls(self) -> int:
        return len(self.directives)


class _CountingCapability:
    name = "list_files"

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, ctx: CapabilityContext, *, args) -> CapabilityResult:
        self.calls.append({"thread_id": ctx.thread_id, "args": args.model_dump()})
        return CapabilityResult(ok=True, output="Files in . (0 items):")


def _p(name: str, /, **arguments: Any) -> ActionProposal:
    return ActionProposal(action=name, arguments=arguments)


def _user(text: str) -> List[ChatMessage]:
    return [ChatMessage(role=MessageRole.user, content=text)]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "app.py").write_text("print('hi')\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def sessions() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def recorded_outcomes(monkeypatch) -> List[ActionOutcome]:
    """Outcomes handed to the transition engine, in order."""
    seen: List[ActionOutcome] = []

    def _recording_transition(prior, outcome, **kwargs):
        seen.append(outcome)
        return transition(prior, outcome, **kwargs)

    monkeypatch.setattr(engine_module, "transition", _recording_transition)
    return seen


def _engine(
    reasoning: _ScriptedReasoning,
    sessions: InMemorySessionRepository,
    workspace: Path,
    *,
    strict_affirmative: bool = False,
) -> AgentEngine:
    registry = build_default_registry(ActionConfig(workspace_root=str(workspace)))
    deps = EngineDeps(
        sessions=sessions,
        capabilities=registry,
        reasoning=reasoning,
        strict_affirmative=strict_affirmative,
    )
    return AgentEngine(deps=deps)


class TestQuestionRoundTrip:
    async def test_clarification_reply_is_the_outcome(self, sessions, workspace, recorded_outcomes):
        reasoning = _ScriptedReasoning(
            [
                _p("ask_for_clarification", question="Which file?"),
                _p("ask_for_clarification", question="Anything else?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("Fix the bug"), recursion_limit=10)
        assert recorded_outcomes == []

        await engine.resume(thread_id="t-1", reply="use src/index.ts", recursion_limit=10)

        assert recorded_outcomes == [ActionOutcome(action="ask_for_clarification", result_text="use src/index.ts")]

    async def test_clarification_then_action_then_completion(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("ask_for_clarification", question="Which bug?"),
                _p("read_file", filepath="app.py"),
                _p("attempt_completion", summary="Read app.py"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        first = await engine.start(thread_id="t-1", messages=_user("Fix the bug"), recursion_limit=10)

        assert first.suspension is not None
        assert first.suspension.kind == SuspensionKind.clarification
        assert first.suspension.details["question"] == "Which bug?"
        assert first.state == SessionState()
        assert first.iterations == 1
        assert not first.terminated
        assert reasoning.calls == 1

        second = await engine.resume(thread_id="t-1", reply="the one in app.py", recursion_limit=10)

        assert second.suspension is not None
        assert second.suspension.kind == SuspensionKind.satisfaction_check
        assert second.state.context_history == [
            "ask_for_clarification: completed successfully",
            "read_file: completed successfully",
        ]
        assert second.iterations == 3
        tool_messages = [m for m in second.messages if m.role == MessageRole.tool]
        assert tool_messages[0].name == "ask_for_clarification"
        assert tool_messages[0].content == "the one in app.py"
        assert tool_messages[1].content.startswith("File: app.py")

        final = await engine.resume(thread_id="t-1", reply="y", recursion_limit=10)

        assert final.terminated
        assert final.suspension is None
        assert final.state == SessionState()
        assert final.directive is not None and final.directive.terminal
        assert final.last_message.content == COMPLETION_MESSAGE
        assert reasoning.calls == 3
        assert await engine.get_session("t-1") == SessionState()

    async def test_first_directive_reflects_empty_state(self, sessions, workspace):
        reasoning = _ScriptedReasoning([_p("ask_for_clarification", question="?")])
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("hi"), recursion_limit=5)

        assert reasoning.directives[0] == build_directive(SessionState())
        assert reasoning.message_counts == [1]

    async def test_no_engine_call_while_suspended(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("confirm_action", action="rm -rf build", reason="stale"),
                _p("ask_for_clarification", question="Anything else?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        result = await engine.start(thread_id="t-1", messages=_user("clean"), recursion_limit=5)
        record = await sessions.get("t-1")

        assert result.suspension.kind == SuspensionKind.action_confirmation
        assert result.suspension.details == {"action": "rm -rf build", "reason": "stale"}
        assert record.awaiting_suspension is not None
        assert record.pending_action.action == "confirm_action"
        assert reasoning.calls == 1
        assert await engine.get_session("t-1") == SessionState()
        assert reasoning.calls == 1

    async def test_confirm_action_reply_becomes_outcome(self, sessions, workspace, recorded_outcomes):
        reasoning = _ScriptedReasoning(
            [
                _p("confirm_action", action="rm -rf build", reason="stale"),
                _p("ask_for_clarification", question="Anything else?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("clean"), recursion_limit=5)
        result = await engine.resume(thread_id="t-1", reply="n", recursion_limit=5)

        assert recorded_outcomes == [ActionOutcome(action="confirm_action", result_text="n")]
        assert result.state.context_history == ["confirm_action: completed successfully"]
        assert result.suspension.kind == SuspensionKind.clarification
        assert reasoning.calls == 2


class TestNewTask:
    async def test_confirmed_task_becomes_current(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("new_task", task_description="Fix login", reasoning="user asked"),
                _p("ask_for_clarification", question="Which file?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        first = await engine.start(thread_id="t-1", messages=_user("Fix login"), recursion_limit=5)
        assert first.suspension.kind == SuspensionKind.task_confirmation

        second = await engine.resume(thread_id="t-1", reply="y", recursion_limit=5)

        assert second.state.current_task == "Fix login"
        assert second.state.context_history == ["Started task: Fix login"]
        assert 'FOCUS: You are working on "Fix login"' in reasoning.directives[-1].instruction_text

    async def test_feedback_is_recorded(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("new_task", task_description="Fix everything"),
                _p("ask_for_clarification", question="ok?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("x"), recursion_limit=5)
        result = await engine.resume(thread_id="t-1", reply="only the auth module", recursion_limit=5)

        assert result.state.context_history == ["Task feedback: only the auth module"]
        assert result.state.current_task is None


class TestCompletion:
    async def test_unsatisfied_completion_keeps_history(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("read_file", filepath="app.py"),
                _p("attempt_completion", summary="first try"),
                _p("attempt_completion", summary="second try"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("read app"), recursion_limit=10)
        after_no = await engine.resume(thread_id="t-1", reply="N", recursion_limit=10)

        assert after_no.state.context_history == [
            "read_file: completed successfully",
            "attempt_completion: completed successfully",
        ]
        assert after_no.suspension.kind == SuspensionKind.satisfaction_check

        done = await engine.resume(thread_id="t-1", reply="yes", recursion_limit=10)

        assert done.terminated
        assert done.state == SessionState()

    async def test_strict_affirmative(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("read_file", filepath="app.py"),
                _p("attempt_completion", summary="done"),
                _p("ask_for_clarification", question="what is missing?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace, strict_affirmative=True)

        await engine.start(thread_id="t-1", messages=_user("read"), recursion_limit=5)
        result = await engine.resume(thread_id="t-1", reply="maybe", recursion_limit=5)

        assert not result.terminated
        assert len(result.state.context_history) == 2

    async def test_satisfied_completion_on_empty_history_continues(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("attempt_completion", summary="nothing yet"),
                _p("ask_for_clarification", question="What now?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("x"), recursion_limit=5)
        result = await engine.resume(thread_id="t-1", reply="y", recursion_limit=5)

        assert not result.terminated
        assert result.state.context_history == ["attempt_completion: completed successfully"]
        assert result.suspension.kind == SuspensionKind.clarification


class TestActionOutcomes:
    async def test_missing_file_is_recorded_as_error(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [_p("read_file", filepath="missing.py"), _p("ask_for_clarification", question="where?")]
        )
        engine = _engine(reasoning, sessions, workspace)

        result = await engine.start(thread_id="t-1", messages=_user("read"), recursion_limit=5)

        assert result.state.context_history == ["read_file: encountered error"]

    async def test_invalid_arguments_are_recorded_as_error(self, sessions, workspace):
        reasoning = _ScriptedReasoning([_p("read_file"), _p("ask_for_clarification", question="?")])
        engine = _engine(reasoning, sessions, workspace)

        result = await engine.start(thread_id="t-1", messages=_user("read"), recursion_limit=5)

        assert result.state.context_history == ["read_file: encountered error"]
        tool = [m for m in result.messages if m.role == MessageRole.tool][0]
        assert tool.content.startswith("Error: invalid arguments for read_file")

    async def test_custom_capability_receives_validated_args(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [_p("list_files", directory="src"), _p("ask_for_clarification", question="?")]
        )
        engine = _engine(reasoning, sessions, workspace)
        counting = _CountingCapability()
        engine._deps.capabilities.register(counting)

        await engine.start(thread_id="t-1", messages=_user("list"), recursion_limit=5)

        assert counting.calls == [{"thread_id": "t-1", "args": {"directory": "src", "pattern": None}}]


class TestFatalErrors:
    async def test_loop_bound(self, sessions, workspace):
        reasoning = _ScriptedReasoning([_p("list_files", directory=".")], repeat_last=True)
        engine = _engine(reasoning, sessions, workspace)

        with pytest.raises(LoopBoundExceededError) as exc:
            await engine.start(thread_id="t-1", messages=_user("loop"), recursion_limit=3)

        assert reasoning.calls == 3
        assert exc.value.limit == 3
        assert exc.value.thread_id == "t-1"
        assert exc.value.state.context_history == ["list_files: completed successfully"] * 3
        assert (await engine.get_session("t-1")) == exc.value.state

    async def test_loop_bound_counts_across_resumes(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("ask_for_clarification", question="?"),
                _p("list_files", directory="."),
                _p("list_files", directory="."),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("x"), recursion_limit=2)
        with pytest.raises(LoopBoundExceededError):
            await engine.resume(thread_id="t-1", reply="answer", recursion_limit=2)

        assert reasoning.calls == 2

    async def test_unknown_action_is_fatal(self, sessions, workspace, caplog):
        reasoning = _ScriptedReasoning([_p("delete_repo")])
        engine = _engine(reasoning, sessions, workspace)

        with caplog.at_level(logging.ERROR, logger="taskloop_ai.agent_core.runtime.engine"):
            with pytest.raises(UnknownActionError):
                await engine.start(thread_id="t-1", messages=_user("x"), recursion_limit=5)

        assert "delete_repo" in caplog.text

    async def test_resume_without_suspension(self, sessions, workspace):
        engine = _engine(_ScriptedReasoning([]), sessions, workspace)

        with pytest.raises(SuspensionStateError):
            await engine.resume(thread_id="nobody", reply="y", recursion_limit=5)


class TestSessions:
    async def test_state_persists_across_runs_on_a_thread(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("read_file", filepath="app.py"),
                _p("ask_for_clarification", question="next?"),
                _p("ask_for_clarification", question="again?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="t-1", messages=_user("first"), recursion_limit=5)
        second = await engine.start(thread_id="t-1", messages=_user("second"), recursion_limit=5)

        assert second.state.context_history == ["read_file: completed successfully"]
        assert second.iterations == 1
        assert second.messages[0].content == "second"
        assert "read_file: completed successfully" in reasoning.directives[-1].instruction_text

    async def test_threads_do_not_share_state(self, sessions, workspace):
        reasoning = _ScriptedReasoning(
            [
                _p("read_file", filepath="app.py"),
                _p("ask_for_clarification", question="a?"),
                _p("ask_for_clarification", question="b?"),
            ]
        )
        engine = _engine(reasoning, sessions, workspace)

        await engine.start(thread_id="a", messages=_user("x"), recursion_limit=5)
        other = await engine.start(thread_id="b", messages=_user("y"), recursion_limit=5)

        assert other.state == SessionState()
        assert (await engine.get_session("a")).context_history == ["read_file: completed successfully"]

    async def test_unknown_thread_has_empty_session(self, sessions, workspace):
        engine = _engine(_ScriptedReasoning([]), sessions, workspace)

        assert await engine.get_session("never") == SessionState()

