"""
Monitoring and Tracing Configuration Module.

Optional Pydantic Logfire integration. When enabled, every reasoning-engine
call made through pydantic-ai is traced, and the orchestrator reports run
start/finish events.

Configuration is read from ``LOGFIRE_*`` environment variables; monitoring is
off unless ``LOGFIRE_ENABLED`` is truthy and ``LOGFIRE_TOKEN`` is set.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "taskloop-ai")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")
LOGFIRE_TRACE_PYDANTIC_AI = os.getenv("LOGFIRE_TRACE_PYDANTIC_AI", "true").lower() in ("true", "1", "yes")

_initialized = False


def initialize_logfire() -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Returns:
        True when Logfire was configured, False when monitoring stays off.
    """
    global _initialized

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )

        if LOGFIRE_TRACE_PYDANTIC_AI:
            try:
                logfire.instrument_pydantic_ai()
                logger.info("Logfire: Pydantic AI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument Pydantic AI: {e}")

        _initialized = True
        logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
        return True

    except ImportError:
        logger.warning(
            "Logfire is enabled but 'logfire' package is not installed. Install it with: pip install logfire"
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
    return False


def log_run_started(thread_id: str, recursion_limit: int) -> None:
    """Report the start of an orchestrator run."""
    if not _initialized:
        return
    try:
        import logfire

        logfire.info("Agent run started", thread_id=thread_id, recursion_limit=recursion_limit)
    except Exception:
        logger.debug(f"Could not log run start to Logfire: thread_id={thread_id}")


def log_run_finished(thread_id: str, status: str, iterations: int, error: Optional[str] = None) -> None:
    """
    Report the end of an orchestrator run.

    Args:
        thread_id: Task thread identifier
        status: ``completed`` or the fatal error kind
        iterations: Reasoning-engine proposals made during the run
        error: Error message when the run failed
    """
    if not _initialized:
        return
    try:
        import logfire

        logfire.info(
            "Agent run finished",
            thread_id=thread_id,
            status=status,
            iterations=iterations,
            error=error,
        )
    except Exception:
        logger.debug(f"Could not log run finish to Logfire: thread_id={thread_id}")
