"""
Core utilities and configuration for TaskLoop-AI.

This package provides shared functionality: environment-driven settings,
logging configuration and optional Logfire monitoring.
"""

from taskloop_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
