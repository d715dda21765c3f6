from __future__ import annotations

import asyncio
import json
from typing import Optional

from pydantic import ValidationError

from odootools.common.errors import QueryTimeoutError, ResultParseError, StatementError
from odootools.common.logger import get_logger
from odootools.common.settings import settings
from odootools.execution.channel import ParameterChannel
from odootools.execution.contracts import ErrorPayload, QueryResult
from odootools.execution.tokens import RunKeys

logger = get_logger("result_poller")


def parse_result(raw: str) -> QueryResult:
    try:
        return QueryResult.model_validate_json(raw)
    except ValidationError as exc:
        raise ResultParseError("Failed to parse query result", details=str(exc)) from exc


def extract_error_message(raw: str) -> str:
    """Best-effort extraction of the remote error text from an error payload."""
    try:
        return ErrorPayload.model_validate(json.loads(raw)).error_message
    except (ValueError, ValidationError):
        return raw


class ResultPoller:
    """Waits for the scheduled job to publish its result or its error.

    Args:
        channel: Parameter side channel to read from.
        poll_interval_ms: Delay between two polling rounds.
    """

    def __init__(self, channel: ParameterChannel, poll_interval_ms: Optional[int] = None):
        self.channel = channel
        self.poll_interval_ms = poll_interval_ms if poll_interval_ms is not None else settings.poll_interval_ms

    async def wait_for_result(self, keys: RunKeys, timeout_ms: int) -> QueryResult:
        """Polls both keys until one appears or ``timeout_ms`` elapses.

        Each round reads the result key, then the error key, and only then
        checks the deadline, so the last round always happens at or after
        the deadline and a late result is still returned.

        Raises:
            ResultParseError: The result payload is malformed.
            StatementError: The job published an error payload.
            QueryTimeoutError: Neither key appeared in time.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000
        rounds = 0

        while True:
            rounds += 1
            raw_result = await self.channel.read(keys.result_key)
            if raw_result:
                logger.debug(f"Result published after {rounds} poll round(s)")
                return parse_result(raw_result)

            raw_error = await self.channel.read(keys.error_key)
            if raw_error:
                message = extract_error_message(raw_error)
                logger.info(f"Statement failed remotely: {message}")
                raise StatementError(message)

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning(f"No outcome after {rounds} poll round(s) and {timeout_ms}ms")
                raise QueryTimeoutError(timeout_ms)

            await asyncio.sleep(min(self.poll_interval_ms / 1000, remaining))
