from __future__ import annotations

"""LangGraph runtime engine.

``AgentEngine`` runs the orchestrator loop for one task thread: ask the
reasoning engine for an action, classify it, perform it, fold the outcome into
the thread's session state, repeat.

Execution model
---------------

- The engine runs a LangGraph state machine over a small ``_GraphState``.
  Durable per-thread data lives in the ``SessionRecord`` in
  ``EngineDeps.sessions`` and is re-read by every node.
- Each iteration makes exactly one reasoning-engine call. ``propose`` refuses
  to make call number ``limit + 1`` and raises ``LoopBoundExceededError``.
- ACTION-category actions execute immediately and their outcome goes straight
  to the transition engine.
- NEW_TASK, QUESTION and COMPLETION actions suspend the thread: the request is
  stored on the record and the graph ends without calling the reasoning
  engine again.

Suspend/resume
--------------

Suspension is an explicit two-phase protocol. ``start``/``resume`` return a
``RunResult`` whose ``suspension`` is set while the thread waits; the caller
obtains a reply however it likes and calls ``resume(thread_id, reply)``. The
graph is re-entered at ``start``, routes to ``resume``, turns the reply into
the action outcome and continues the loop.
"""

import logging
from typing import Optional, Sequence

from langgraph.errors import GraphRecursionError
from langgraph.graph import END, StateGraph
from pydantic import ValidationError

from ..capabilities.base import CapabilityContext
from ..errors import AgentCoreError, LoopBoundExceededError
from ..schemas.domain import (
    ActionOutcome,
    ActionProposal,
    ChatMessage,
    MessageRole,
    RunResult,
    SessionRecord,
    SessionState,
)
from .models import EngineDeps, _GraphState
from .suspension import begin_resume, outcome_from_reply, suspend
from .transition import build_directive, transition

logger = logging.getLogger(__name__)

COMPLETION_MESSAGE = "Task has been completed successfully. No further actions needed."


class AgentEngine:
    """Drive the orchestrator loop with persistence and suspension.

    The engine only orchestrates: the reasoning engine picks actions, the
    capabilities in ``EngineDeps.capabilities`` perform them, and the pure
    ``transition`` function computes the next state.
    """

    def __init__(self, *, deps: EngineDeps) -> None:
        """
        Initialize the AgentEngine.

        Args:
            deps: The runtime dependencies (session store, capabilities, reasoning engine).
        """
        self._deps = deps
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("propose", self._node_propose)
        g.add_node("dispatch", self._node_dispatch)
        g.add_node("resume", self._node_resume)
        g.add_node("transition", self._node_transition)
        g.add_node("suspended", self._node_suspended)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_conditional_edges(
            "start",
            self._route_after_start,
            {"resume": "resume", "propose": "propose"},
        )
        g.add_edge("propose", "dispatch")
        g.add_conditional_edges(
            "dispatch",
            self._route_after_dispatch,
            {"suspend": "suspended", "transition": "transition"},
        )
        g.add_edge("resume", "transition")
        g.add_conditional_edges(
            "transition",
            self._route_after_transition,
            {"finish": "finish", "continue": "propose"},
        )
        g.add_edge("suspended", END)
        g.add_edge("finish", END)
        return g.compile()

    async def start(
        self,
        *,
        thread_id: str,
        messages: Sequence[ChatMessage],
        recursion_limit: int,
    ) -> RunResult:
        """Begin a run on ``thread_id`` with the caller's initial messages.

        Session state from earlier runs on the same thread is kept. A
        suspension still pending from an abandoned run is discarded.
        """
        record = await self._deps.sessions.get(thread_id)
        if record is None:
            record = SessionRecord(thread_id=thread_id)
        elif record.awaiting_suspension is not None:
            logger.warning(
                f"thread {thread_id}: discarding pending {record.awaiting_suspension.kind.value} "
                f"suspension from a previous run"
            )
        record = record.model_copy(
            update={
                "messages": list(messages),
                "pending_action": None,
                "awaiting_suspension": None,
                "iterations": 0,
            }
        )
        await self._deps.sessions.save(record)
        logger.info(f"thread {thread_id}: run started (limit {recursion_limit})")

        state: _GraphState = {"thread_id": thread_id, "limit": recursion_limit}
        return await self._invoke(state)

    async def resume(self, *, thread_id: str, reply: str, recursion_limit: int) -> RunResult:
        """Deliver the human's ``reply`` to a suspended thread and continue the loop.

        Raises:
            SuspensionStateError: If the thread is not awaiting a reply.
        """
        record = await self._deps.sessions.get(thread_id)
        record, proposal = begin_resume(record, thread_id=thread_id)
        await self._deps.sessions.save(record)

        state: _GraphState = {
            "thread_id": thread_id,
            "limit": recursion_limit,
            "_resume_reply": reply,
            "_proposal": proposal,
        }
        return await self._invoke(state)

    async def get_session(self, thread_id: str) -> SessionState:
        """Return the thread's current session state (empty for unknown threads)."""
        record = await self._deps.sessions.get(thread_id)
        return record.state if record is not None else SessionState()

    async def _invoke(self, state: _GraphState) -> RunResult:
        thread_id, limit = state["thread_id"], state["limit"]
        try:
            # each iteration walks propose -> dispatch -> transition
            final = await self._graph.ainvoke(state, config={"recursion_limit": limit * 4 + 10})
        except GraphRecursionError as e:
            record = await self._load(thread_id)
            raise LoopBoundExceededError(thread_id=thread_id, limit=limit, state=record.state) from e
        except AgentCoreError as e:
            record = await self._deps.sessions.get(thread_id)
            last = record.state if record is not None else None
            logger.error(f"thread {thread_id}: run failed: {e}; last state: {last}")
            raise

        record = await self._load(thread_id)
        return RunResult(
            thread_id=thread_id,
            messages=list(record.messages),
            state=record.state,
            directive=final.get("_directive"),
            suspension=record.awaiting_suspension,
            iterations=record.iterations,
            terminated=bool(final.get("_finished")),
        )

    async def _load(self, thread_id: str) -> SessionRecord:
        record = await self._deps.sessions.get(thread_id)
        if record is None:
            raise KeyError(f"no session for thread {thread_id!r}")
        return record

    def _context(self, record: SessionRecord) -> CapabilityContext:
        return CapabilityContext(thread_id=record.thread_id, state=record.state, deps=self._deps)

    async def _node_start(self, state: _GraphState) -> _GraphState:
        if state.get("_resume_reply") is None:
            record = await self._load(state["thread_id"])
            state["_directive"] = build_directive(record.state, self._deps.catalog)
        state["_finished"] = False
        state["_suspension"] = None
        return state

    def _route_after_start(self, state: _GraphState) -> str:
        return "resume" if state.get("_resume_reply") is not None else "propose"

    async def _node_propose(self, state: _GraphState) -> _GraphState:
        thread_id, limit = state["thread_id"], state["limit"]
        record = await self._load(thread_id)
        if record.iterations >= limit:
            raise LoopBoundExceededError(thread_id=thread_id, limit=limit, state=record.state)

        directive = state.get("_directive") or build_directive(record.state, self._deps.catalog)
        proposal = await self._deps.reasoning.propose(list(record.messages), directive)
        logger.info(f"thread {thread_id}: iteration {record.iterations + 1}/{limit}: {proposal.action}")

        message = ChatMessage(role=MessageRole.assistant, name=proposal.action, content=_describe(proposal))
        record = record.model_copy(
            update={"iterations": record.iterations + 1, "messages": [*record.messages, message]}
        )
        await self._deps.sessions.save(record)

        state["_proposal"] = proposal
        state["_outcome"] = None
        return state

    async def _node_dispatch(self, state: _GraphState) -> _GraphState:
        record = await self._load(state["thread_id"])
        proposal = state.get("_proposal")
        assert proposal is not None

        # raises UnknownActionError for actions outside the catalog
        spec = self._deps.catalog.get(proposal.action)
        try:
            args = spec.args_model.model_validate(proposal.arguments)
        except ValidationError as e:
            logger.warning(f"thread {record.thread_id}: invalid arguments for {spec.name}: {e}")
            text = f"Error: invalid arguments for {spec.name}: {e.error_count()} validation error(s)"
            state["_outcome"] = ActionOutcome(action=spec.name, result_text=text)
            return state

        cap = self._deps.capabilities.get(spec.name)
        ctx = self._context(record)
        if spec.suspends:
            request = cap.suspension_request(ctx, args=args)  # type: ignore[union-attr]
            await self._deps.sessions.save(suspend(record, proposal=proposal, request=request))
            state["_suspension"] = request
            return state

        result = await cap.execute(ctx, args=args)  # type: ignore[union-attr]
        state["_outcome"] = ActionOutcome(
            action=spec.name, result_text=result.output, task_decision=result.task_decision
        )
        return state

    def _route_after_dispatch(self, state: _GraphState) -> str:
        return "suspend" if state.get("_suspension") is not None else "transition"

    async def _node_resume(self, state: _GraphState) -> _GraphState:
        record = await self._load(state["thread_id"])
        proposal = state.get("_proposal")
        reply = state.get("_resume_reply")
        assert proposal is not None and reply is not None

        spec = self._deps.catalog.get(proposal.action)
        args = spec.args_model.model_validate(proposal.arguments)
        cap = self._deps.capabilities.get(spec.name)
        result = await cap.on_reply(self._context(record), args=args, reply=reply)  # type: ignore[union-attr]

        state["_outcome"] = outcome_from_reply(proposal, result)
        state["_resume_reply"] = None
        return state

    async def _node_transition(self, state: _GraphState) -> _GraphState:
        record = await self._load(state["thread_id"])
        outcome = state.get("_outcome")
        assert outcome is not None

        next_state, directive = transition(
            record.state,
            outcome,
            catalog=self._deps.catalog,
            strict_affirmative=self._deps.strict_affirmative,
        )
        message = ChatMessage(role=MessageRole.tool, name=outcome.action, content=outcome.result_text)
        record = record.model_copy(
            update={
                "state": next_state,
                "pending_action": None,
                "awaiting_suspension": None,
                "messages": [*record.messages, message],
            }
        )
        await self._deps.sessions.save(record)

        state["_directive"] = directive
        state["_finished"] = directive.terminal
        state["_outcome"] = None
        state["_proposal"] = None
        return state

    def _route_after_transition(self, state: _GraphState) -> str:
        return "finish" if state.get("_finished") else "continue"

    async def _node_suspended(self, state: _GraphState) -> _GraphState:
        """Terminal node for a suspended thread.

        The graph transitions to END after this node; the caller resumes with
        ``AgentEngine.resume``.
        """
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        record = await self._load(state["thread_id"])
        message = ChatMessage(role=MessageRole.assistant, content=COMPLETION_MESSAGE)
        await self._deps.sessions.save(record.model_copy(update={"messages": [*record.messages, message]}))
        logger.info(f"thread {record.thread_id}: run completed after {record.iterations} iterations")
        return state


def _describe(proposal: ActionProposal) -> str:
    if not proposal.arguments:
        return proposal.action
    args = ", ".join(f"{k}={v!r}" for k, v in proposal.arguments.items())
    return f"{proposal.action}({args})"


def run_result_summary(result: Optional[RunResult]) -> str:
    """One-line description of a run result for logs."""
    if result is None:
        return "no result"
    if result.terminated:
        return f"terminated after {result.iterations} iterations"
    if result.suspension is not None:
        return f"suspended on {result.suspension.action} after {result.iterations} iterations"
    return f"stopped after {result.iterations} iterations"
