from __future__ import annotations

"""High-level orchestration service for task threads.

``AgentService`` provides an application-friendly API for running the loop to
completion without driving suspensions by hand.

Workflow
--------

- ``run``:

  1. Starts the engine on the configured thread with the initial messages.
  2. While the thread is suspended, asks the ``HumanChannel`` for a reply and
     resumes the engine with it.
  3. Returns the final ``RunResult`` once the run terminates.

``AgentService`` is intentionally thin: loop semantics live in the engine and
the transition function.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from ..core.monitoring import log_run_finished, log_run_started
from .errors import AgentCoreError
from .runtime import EngineDeps, HumanChannel
from .runtime.engine import run_result_summary
from .schemas.domain import ChatMessage, RunConfig, RunResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentServiceDeps:
    """Dependency bundle for ``AgentService``.

    This allows applications and tests to inject:

    - session/capability/reasoning dependencies for the runtime engine,
    - the channel that collects human replies.
    """

    engine_deps: EngineDeps
    channel: HumanChannel


class AgentService:
    """Run a task thread to completion, answering suspensions via a channel."""

    def __init__(self, *, deps: AgentServiceDeps) -> None:
        self._deps = deps

    async def run(self, initial_messages: Sequence[ChatMessage], config: RunConfig) -> RunResult:
        """Run the loop until the human is satisfied.

        Raises:
            LoopBoundExceededError: If ``config.recursion_limit`` proposals are
                used up first.
            UnknownActionError: If the reasoning engine picks an action outside
                the catalog.
        """
        from .factory import build_engine

        engine = build_engine(deps=self._deps.engine_deps)
        thread_id, limit = config.thread_id, config.recursion_limit
        log_run_started(thread_id, limit)

        try:
            result = await engine.start(thread_id=thread_id, messages=initial_messages, recursion_limit=limit)
            while result.suspension is not None:
                logger.debug(f"thread {thread_id}: {run_result_summary(result)}")
                reply = await self._deps.channel.prompt(result.suspension)
                result = await engine.resume(thread_id=thread_id, reply=reply, recursion_limit=limit)
        except AgentCoreError as e:
            record = await self._deps.engine_deps.sessions.get(thread_id)
            iterations = record.iterations if record is not None else 0
            log_run_finished(thread_id, type(e).__name__, iterations, error=str(e))
            raise

        log_run_finished(thread_id, "completed", result.iterations)
        logger.info(f"thread {thread_id}: {run_result_summary(result)}")
        return result
