"""
Job Orchestrator: runs one statement through a one-shot scheduled job.

Odoo's RPC surface has no "execute this SQL and return the rows" call. The
orchestrator bridges that gap by creating an ``ir.cron`` record whose code
runs the statement inside a savepoint and publishes the outcome in
``ir.config_parameter``; it then triggers the job, polls for the outcome and
always removes every remote artifact it created.

Lifecycle of a run::

    idle -> authenticated -> compiled -> created -> triggered
         -> (succeeded | failed | timed_out) -> cleaned_up

Any state may short-cut to ``failed``; ``cleaned_up`` is reached from every
state through the ``finally`` block of ``execute``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from odootools.common.errors import (
    QueryTimeoutError,
    RemoteCallError,
    SetupError,
    StatementError,
    TriggerError,
)
from odootools.common.logger import get_logger, run_context
from odootools.common.settings import Settings, settings as default_settings
from odootools.execution.channel import ParameterChannel
from odootools.execution.cleanup import JOB_MODEL, CleanupGuarantor
from odootools.execution.compiler import StatementCompiler
from odootools.execution.contracts import TERMINAL_STATES, QueryResult, RunState
from odootools.execution.poller import ResultPoller, extract_error_message
from odootools.execution.tokens import RunKeys, new_token
from odootools.rpc.session import RemoteSession

logger = get_logger("job_orchestrator")

_FORWARD = {
    RunState.IDLE: {RunState.AUTHENTICATED},
    RunState.AUTHENTICATED: {RunState.COMPILED},
    RunState.COMPILED: {RunState.CREATED},
    RunState.CREATED: {RunState.TRIGGERED},
    RunState.TRIGGERED: {RunState.SUCCEEDED, RunState.TIMED_OUT},
}


@dataclass
class StatementRun:
    """Mutable bookkeeping of one run; owned by a single ``execute`` call."""

    statement: str
    commit: bool
    keys: RunKeys
    state: RunState = RunState.IDLE
    job_id: Optional[int] = None
    history: List[RunState] = field(default_factory=lambda: [RunState.IDLE])

    def advance(self, new_state: RunState) -> None:
        if not self._allows(new_state):
            raise RuntimeError(f"Invalid run transition {self.state.value} -> {new_state.value}")
        logger.debug(f"Run {self.keys.token}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _allows(self, new_state: RunState) -> bool:
        if new_state is RunState.CLEANED_UP:
            return self.state is not RunState.CLEANED_UP
        if new_state is RunState.FAILED:
            return self.state not in TERMINAL_STATES and self.state is not RunState.CLEANED_UP
        return new_state in _FORWARD.get(self.state, set())


class JobOrchestrator:
    """Executes statements on the database behind ``session``.

    Args:
        session: Authenticated (or lazily authenticating) remote session.
        config: Settings providing key prefixes, poll interval and defaults.
        poll_interval_ms: Overrides the configured poll interval.
    """

    def __init__(
        self,
        session: RemoteSession,
        config: Optional[Settings] = None,
        poll_interval_ms: Optional[int] = None,
    ):
        self.session = session
        self.config = config or default_settings
        self.compiler = StatementCompiler()
        self.channel = ParameterChannel(session)
        self.poller = ResultPoller(
            self.channel,
            poll_interval_ms if poll_interval_ms is not None else self.config.poll_interval_ms,
        )
        self.cleaner = CleanupGuarantor(session, self.channel)

    def prepare(self, statement: str, commit: bool = False) -> StatementRun:
        """Allocates a fresh token and the names derived from it."""
        return StatementRun(
            statement=statement,
            commit=commit,
            keys=RunKeys.for_token(new_token(), self.config),
        )

    async def run_query(
        self,
        statement: str,
        timeout_ms: Optional[int] = None,
        commit: bool = False,
    ) -> QueryResult:
        return await self.execute(self.prepare(statement, commit), timeout_ms)

    async def execute(self, run: StatementRun, timeout_ms: Optional[int] = None) -> QueryResult:
        if run.state is not RunState.IDLE:
            raise RuntimeError(f"Run {run.keys.token} was already executed.")
        if timeout_ms is None:
            timeout_ms = self.config.default_statement_timeout_ms

        with run_context(run.keys.token):
            mode = "commit" if run.commit else "dry-run"
            logger.info(f"Running statement on {self.session} ({mode}, timeout {timeout_ms}ms)")
            try:
                await self.session.authenticate()
                run.advance(RunState.AUTHENTICATED)

                script = self.compiler.compile(run.statement, run.keys, run.commit)
                run.advance(RunState.COMPILED)

                run.job_id = await self._create_job(run, script)
                run.advance(RunState.CREATED)

                await self._trigger_job(run)
                run.advance(RunState.TRIGGERED)

                result = await self.poller.wait_for_result(run.keys, timeout_ms)
                run.advance(RunState.SUCCEEDED)
                logger.info(f"Statement finished: {result.row_count} row(s), dry_run={result.dry_run}")
                return result
            except QueryTimeoutError:
                run.advance(RunState.TIMED_OUT)
                raise
            except BaseException:
                if run.state not in TERMINAL_STATES:
                    run.advance(RunState.FAILED)
                raise
            finally:
                await self.cleaner.cleanup(run.job_id, run.keys)
                run.advance(RunState.CLEANED_UP)

    async def _find_job_model_id(self) -> int:
        try:
            model_ids = await self.session.invoke(
                "ir.model", "search", [[["model", "=", JOB_MODEL]]], {"limit": 1}
            )
        except RemoteCallError as exc:
            raise SetupError(f"Could not look up the {JOB_MODEL} model: {exc.message}") from exc

        if isinstance(model_ids, list):
            if not model_ids:
                raise SetupError(f"Could not find {JOB_MODEL} model")
            model_id = model_ids[0]
        else:
            model_id = model_ids

        if not isinstance(model_id, int) or isinstance(model_id, bool):
            raise SetupError(f"Unexpected model_id response type: {type(model_id).__name__}")
        return model_id

    def _job_values(self, run: StatementRun, model_id: int, script: str) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "name": run.keys.job_name,
            "model_id": model_id,
            "state": "code",
            "code": script,
            "interval_number": 1,
            "interval_type": "minutes",
            "active": True,
            "nextcall": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            "user_id": self.session.uid,
        }
        if self.config.cron_legacy_fields:
            values["numbercall"] = 1
            values["doall"] = True
        return values

    async def _create_job(self, run: StatementRun, script: str) -> int:
        model_id = await self._find_job_model_id()
        values = self._job_values(run, model_id, script)

        try:
            job_id = await self.session.invoke(JOB_MODEL, "create", [values])
        except RemoteCallError as exc:
            raise SetupError(f"Failed to create scheduled action: {exc.message}") from exc

        if isinstance(job_id, list) and len(job_id) == 1:
            job_id = job_id[0]
        if not isinstance(job_id, int) or isinstance(job_id, bool) or job_id <= 0:
            raise SetupError("Failed to create scheduled action")

        logger.debug(f"Created job {job_id} ({run.keys.job_name})")
        return job_id

    async def _trigger_job(self, run: StatementRun) -> None:
        try:
            await self.session.invoke(JOB_MODEL, "method_direct_trigger", [[run.job_id]])
        except RemoteCallError as exc:
            raw_error = await self.channel.read(run.keys.error_key)
            if raw_error:
                raise StatementError(extract_error_message(raw_error), statement=run.statement) from exc
            raise TriggerError(exc.message, status_code=exc.status_code, details=exc.details) from exc
