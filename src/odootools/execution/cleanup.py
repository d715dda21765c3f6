from __future__ import annotations

from typing import Optional

from odootools.common.fallible import best_effort
from odootools.common.logger import get_logger
from odootools.execution.channel import ParameterChannel
from odootools.execution.tokens import RunKeys
from odootools.rpc.session import RemoteSession

logger = get_logger("cleanup")

JOB_MODEL = "ir.cron"


class CleanupGuarantor:
    """Removes the scheduled job and both side-channel keys of a run.

    ``cleanup`` never raises: each removal is attempted independently and its
    failure is ignored, so the run's own outcome always reaches the caller.
    """

    def __init__(self, session: RemoteSession, channel: ParameterChannel):
        self.session = session
        self.channel = channel

    async def cleanup(self, job_id: Optional[int], keys: RunKeys) -> None:
        if self.session.uid is None:
            # Never logged in: nothing can have been created remotely.
            return

        if job_id is not None:
            await best_effort(
                self.session.invoke(JOB_MODEL, "unlink", [[job_id]]),
                what=f"deleting job {job_id}",
            )

        for key in keys.storage_keys:
            await best_effort(self.channel.delete(key), what=f"deleting parameter {key}")

        logger.debug(f"Cleaned up job {job_id} and keys for run {keys.token}")
