"""
Logging Configuration Module.

Centralized logging setup for taskloop-ai. Every module obtains its logger via
``get_logger(__name__)``; the process entry point calls ``setup_logging`` once.

Features:
- Configurable root level plus per-module levels
- Console logging, optional file logging
- simple / detailed / json line formats
"""

import logging
from pathlib import Path
from typing import Optional

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

LOG_FILE_NAME = "taskloop_ai.log"

# Module-specific log levels
MODULE_LOG_LEVELS = {
    "taskloop_ai.agent_core": "DEBUG",
    "taskloop_ai.agent_core.runtime": "DEBUG",
    "taskloop_ai.agent_core.capabilities": "INFO",
    "taskloop_ai.agent_core.repos": "INFO",
    "taskloop_ai.agent_core.reasoning": "DEBUG",
    # Third-party libraries (reduce noise)
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "openai": "WARNING",
    "asyncio": "WARNING",
}


def _format_for(name: str) -> str:
    if name == "json":
        return JSON_FORMAT
    if name == "simple":
        return SIMPLE_FORMAT
    return DETAILED_FORMAT


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
    log_dir: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Unset arguments fall back to ``taskloop_ai.core.config.settings``.

    Args:
        log_level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Line format (simple, detailed, json)
        enable_file: Whether to also log to ``<log_dir>/taskloop_ai.log``
        log_dir: Directory for the log file
    """
    from taskloop_ai.core.config import settings

    cfg = settings.logging
    level = (log_level or cfg.level).upper()
    fmt = log_format or cfg.format
    to_file = cfg.enable_file if enable_file is None else enable_file
    directory = log_dir or cfg.file_dir

    formatter = logging.Formatter(_format_for(fmt), datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # filter at handler level

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if to_file:
        Path(directory).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(directory) / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={to_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
