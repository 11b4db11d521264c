"""Interactive demo of the orchestrator loop.

Runs three requests on one thread against the configured model, answering
suspensions from the terminal:

1. an ambiguous request, which should lead to a clarification question,
2. a clear request, which should lead to file actions,
3. a context-building request followed by a request for a summary, which
   should lead to a completion attempt.

Requires credentials for ``TASKLOOP_AI_MODEL`` (``OPENAI_API_KEY`` for the
default model).
"""

from __future__ import annotations

import asyncio
import time
from typing import List

from .agent_core.errors import AgentCoreError
from .agent_core.factory import build_engine_deps, build_service, build_session_repository
from .agent_core.runtime import ConsoleChannel
from .agent_core.schemas.domain import ChatMessage, MessageRole, RunConfig, RunResult
from .core.config import settings
from .core.logging_config import get_logger, setup_logging
from .core.monitoring import initialize_logfire

logger = get_logger(__name__)

BANNER = "=" * 50


def _user(text: str) -> ChatMessage:
    return ChatMessage(role=MessageRole.user, content=text)


def _show(title: str) -> None:
    print(f"\n{BANNER}\n{title}\n{BANNER}")


def _show_response(result: RunResult) -> None:
    last = result.last_message
    print(f"\nAgent Response: {last.content if last is not None else '(none)'}")


async def run_demo() -> None:
    sessions = await build_session_repository(settings)
    service = build_service(
        engine_deps=build_engine_deps(settings=settings, sessions=sessions),
        channel=ConsoleChannel(),
    )
    config = RunConfig(thread_id=settings.thread_id, recursion_limit=settings.recursion_limit)

    _show("SCENARIO 1: Ambiguous Request")
    result = await service.run([_user("Fix the bug")], config)
    _show_response(result)

    _show("SCENARIO 2: Clear Action Request")
    result = await service.run(
        [_user("Find all Python files in the current directory and look for any TODO comments")],
        config,
    )
    _show_response(result)

    _show("SCENARIO 3: Request for Summary")
    context = await service.run([_user("Find all Python files in the current directory")], config)
    follow_up: List[ChatMessage] = [*context.messages, _user("Now show me a summary of what you found")]
    result = await service.run(follow_up, config)
    _show_response(result)

    print("\nDemo completed. Requests were classified into:")
    print("  QUESTION: ambiguous requests needing clarification")
    print("  ACTION: gathering context and taking action")
    print("  COMPLETION: presenting final results")


def main() -> None:
    setup_logging()
    initialize_logfire()
    start_time = time.time()
    try:
        asyncio.run(run_demo())
    except AgentCoreError as e:
        logger.error(f"demo aborted: {e}")
        raise SystemExit(1) from e
    finally:
        logger.info(f"total run time: {time.time() - start_time:.2f}s")


if __name__ == "__main__":
    main()
