from __future__ import annotations

from typing import Optional

import httpx

from odootools.common.settings import Settings
from odootools.execution.contracts import QueryResult
from odootools.execution.orchestrator import JobOrchestrator
from odootools.rpc.models import Connection
from odootools.rpc.session import RemoteSession


async def execute_statement(
    connection: Connection,
    statement: str,
    timeout_ms: Optional[int] = None,
    commit: bool = False,
    *,
    config: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> QueryResult:
    """Runs ``statement`` on the database described by ``connection``.

    A fresh session is opened for the call, so concurrent calls never share an
    identity cache or a request counter.

    Args:
        connection: Target server, database and credentials.
        statement: SQL statement to execute once.
        timeout_ms: Deadline for the outcome to appear (defaults to settings).
        commit: Keep the statement's effects. When False the statement runs
            inside a savepoint that is rolled back (dry run).
        config: Settings override.
        client: Optional shared ``httpx.AsyncClient``; it is left open.

    Returns:
        QueryResult: The statement's columns, rows and counters.

    Raises:
        OdooToolsError: Any subclass, after remote cleanup has completed.
    """
    async with RemoteSession(connection, client=client) as session:
        orchestrator = JobOrchestrator(session, config=config)
        return await orchestrator.run_query(statement, timeout_ms=timeout_ms, commit=commit)
