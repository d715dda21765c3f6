"""
Fallible, non-propagating operations.

Cleanup and secondary-enrichment steps must never replace the outcome of the
operation they belong to. They go through ``best_effort`` instead of being
awaited directly: the coroutine's value is returned, or ``None`` when it
raised.
"""
from __future__ import annotations

from typing import Awaitable, Optional, TypeVar

from odootools.common.logger import get_logger

logger = get_logger("fallible")

T = TypeVar("T")


async def best_effort(operation: Awaitable[T], *, what: str) -> Optional[T]:
    """Awaits ``operation`` and swallows any ``Exception`` it raises.

    Args:
        operation: The awaitable to run.
        what: Short description used in the debug log line on failure.

    Returns:
        The awaited value, or None if the operation failed.
    """
    try:
        return await operation
    except Exception as exc:
        logger.debug(f"Ignored failure while {what}: {type(exc).__name__}: {exc}")
        return None
