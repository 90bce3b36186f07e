"""Unified error formatter for scenario failures"""
from __future__ import annotations

import asyncio


def format_error(exc: BaseException) -> tuple[str, str | None]:
    """Convert a scenario exception to a user-friendly message.

    Returns:
        (error_message, suggestion) - Error message and optional suggestion
    """
    exc_type = type(exc).__name__
    exc_msg = str(exc) or exc_type

    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return "Operation timed out", "Try running the scenario again"

    if isinstance(exc, NotImplementedError):
        return f"Not implemented: {_truncate(exc_msg, 80)}", None

    if isinstance(exc, PermissionError):
        return f"Permission denied: {_truncate(exc_msg, 80)}", "Check file permissions"

    if isinstance(exc, FileNotFoundError):
        return f"File not found: {_truncate(exc_msg, 80)}", None

    if isinstance(exc, ConnectionError):
        return f"Connection failed: {_truncate(exc_msg, 80)}", "Check network connection"

    if isinstance(exc, (ValueError, TypeError)):
        return f"{exc_type}: {_truncate(exc_msg, 100)}", None

    # Generic fallback
    return f"{exc_type}: {_truncate(exc_msg, 100)}", "See the log file for the full traceback"


def _truncate(s: str, max_len: int) -> str:
    return s[:max_len] + "..." if len(s) > max_len else s
