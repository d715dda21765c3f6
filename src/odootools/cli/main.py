#!/usr/bin/env python3
"""Command line front-end for the Odoo toolkit."""
import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import typer
from typing_extensions import Annotated

from odootools.common.errors import OdooToolsError
from odootools.common.settings import settings
from odootools.execution.orchestrator import JobOrchestrator
from odootools.inspection import (
    check_access_rights,
    compare_access_rights,
    compare_modules,
    count_records,
    group_insight,
    list_modules,
    validate_po,
)
from odootools.rpc.models import Connection
from odootools.rpc.session import RemoteSession

from odootools.cli import render
from odootools.cli.console import console, print_error, print_success, print_warning

app = typer.Typer(
    name="odootools",
    help="Diagnostics and administration for Odoo servers over JSON-RPC.",
    no_args_is_help=True,
    add_completion=False,
)

# Shared Options
UrlOption = Annotated[str, typer.Option("--url", envvar="ODOOTOOLS_URL", help="Odoo server URL")]
DbOption = Annotated[str, typer.Option("--db", envvar="ODOOTOOLS_DB", help="Database name")]
UserOption = Annotated[str, typer.Option("--username", "-u", envvar="ODOOTOOLS_USERNAME", help="Login")]
PasswordOption = Annotated[
    str, typer.Option("--password", "-p", envvar="ODOOTOOLS_PASSWORD", help="Password or API key")
]
Url2Option = Annotated[str, typer.Option("--url2", help="Second server URL")]
Db2Option = Annotated[Optional[str], typer.Option("--db2", help="Second database (defaults to --db)")]
User2Option = Annotated[Optional[str], typer.Option("--username2", help="Second login (defaults to --username)")]
Password2Option = Annotated[
    Optional[str], typer.Option("--password2", help="Second password (defaults to --password)")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print raw JSON instead of tables")]


@app.callback()
def global_callback(
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment name, loads .env.<name>")] = None,
):
    """
    Odoo Tools CLI Entry Point.
    """
    if env:
        settings.configure_env(env)


def _connection(url: str, db: str, username: str, password: str) -> Connection:
    return Connection(url=url, db=db, username=username, password=password)


def _run(operation: Callable[..., Awaitable[Any]], *connections: Connection) -> Any:
    async def _main():
        sessions = [RemoteSession(c) for c in connections]
        try:
            return await operation(*sessions)
        finally:
            for session in sessions:
                await session.aclose()

    try:
        return asyncio.run(_main())
    except OdooToolsError as exc:
        print_error(exc.message)
        raise typer.Exit(code=1)


def _print_json(model: Any) -> None:
    data = model.model_dump() if hasattr(model, "model_dump") else model
    console.print_json(json.dumps(data, default=str))


@app.command()
def query(
    statement: Annotated[str, typer.Argument(help="SQL statement to run")],
    url: UrlOption,
    db: DbOption,
    username: UserOption,
    password: PasswordOption,
    commit: Annotated[bool, typer.Option("--commit", help="Keep the statement's effects")] = False,
    timeout_ms: Annotated[Optional[int], typer.Option("--timeout-ms", help="Result deadline")] = None,
    as_json: JsonOption = False,
):
    """Run a SQL statement through a one-shot scheduled job (dry run unless --commit)."""
    result = _run(
        lambda s: JobOrchestrator(s).run_query(statement, timeout_ms=timeout_ms, commit=commit),
        _connection(url, db, username, password),
    )
    if as_json:
        _print_json(result)
        return
    console.print(render.query_table(result))
    print_success(f"{result.row_count} row(s), {result.affected_row_count} affected")
    if result.dry_run:
        print_warning("Dry run: changes were rolled back.")


@app.command()
def modules(url: UrlOption, db: DbOption, username: UserOption, password: PasswordOption, as_json: JsonOption = False):
    """List every module known to the server."""
    result = _run(list_modules, _connection(url, db, username, password))
    if as_json:
        _print_json([m.model_dump() for m in result])
        return
    console.print(render.modules_table(result))


@app.command("compare-modules")
def compare_modules_command(
    url: UrlOption,
    db: DbOption,
    username: UserOption,
    password: PasswordOption,
    url2: Url2Option,
    db2: Db2Option = None,
    username2: User2Option = None,
    password2: Password2Option = None,
    as_json: JsonOption = False,
):
    """Compare the installed modules of two servers."""
    result = _run(
        compare_modules,
        _connection(url, db, username, password),
        _connection(url2, db2 or db, username2 or username, password2 or password),
    )
    if as_json:
        _print_json(result)
        return
    for table in render.module_comparison_tables(result):
        console.print(table)
    print_success(f"{len(result.common)} module(s) installed on both")


@app.command()
def count(
    model: Annotated[str, typer.Argument(help="Technical model name, e.g. res.partner")],
    url: UrlOption,
    db: DbOption,
    username: UserOption,
    password: PasswordOption,
    domain: Annotated[str, typer.Option("--domain", help="Domain as JSON")] = "[]",
    as_json: JsonOption = False,
):
    """Count the records of a model matching a domain."""
    try:
        parsed = json.loads(domain)
    except ValueError:
        print_error("Domain must be valid JSON")
        raise typer.Exit(code=2)
    if not isinstance(parsed, list):
        print_error("Domain must be an array")
        raise typer.Exit(code=2)

    result = _run(lambda s: count_records(s, model, parsed), _connection(url, db, username, password))
    if as_json:
        _print_json(result)
        return
    print_success(f"{result.count} {model} record(s) match")


@app.command()
def access(
    login: Annotated[str, typer.Argument(help="Login of the user to inspect")],
    url: UrlOption,
    db: DbOption,
    username: UserOption,
    password: PasswordOption,
    as_json: JsonOption = False,
):
    """Show the effective model permissions of a user."""
    result = _run(lambda s: check_access_rights(s, login), _connection(url, db, username, password))
    if as_json:
        _print_json(result)
        return
    console.print(render.access_report_table(result))


@app.command("compare-access")
def compare_access(
    login1: Annotated[str, typer.Argument(help="First user's login")],
    login2: Annotated[str, typer.Argument(help="Second user's login")],
    url: UrlOption,
    db: DbOption,
    username: UserOption,
    password: PasswordOption,
    url2: Annotated[Optional[str], typer.Option("--url2", help="Second server URL (defaults to --url)")] = None,
    db2: Db2Option = None,
    username2: User2Option = None,
    password2: Password2Option = None,
    as_json: JsonOption = False,
):
    """Compare the permissions of two users, on one or two servers."""
    result = _run(
        lambda s1, s2: compare_access_rights(s1, login1, s2, login2),
        _connection(url, db, username, password),
        _connection(url2 or url, db2 or db, username2 or username, password2 or password),
    )
    if as_json:
        _print_json(result)
        return
    for table in render.access_comparison_tables(result):
        console.print(table)


@app.command()
def groups(
    login: Annotated[str, typer.Argument(help="Login of the user to inspect")],
    url: UrlOption,
    db: DbOption,
    username: UserOption,
    password: PasswordOption,
    as_json: JsonOption = False,
):
    """Describe the groups of a user and what each of them grants."""
    result = _run(lambda s: group_insight(s, login), _connection(url, db, username, password))
    if as_json:
        _print_json(result)
        return
    console.print(render.group_table(result))
    print_success(
        f"{result.totals.groups} group(s), {result.totals.implied_groups} implied, "
        f"{result.totals.models_with_access} model(s) with access"
    )


@app.command("validate-po")
def validate_po_command(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Path to the .po file")],
    as_json: JsonOption = False,
):
    """Lint a .po translation file for missing, mismatched and duplicate entries."""
    try:
        report = validate_po(path.read_text(encoding="utf-8"))
    except OdooToolsError as exc:
        print_error(exc.message if exc.details is None else f"{exc.message}: {exc.details}")
        raise typer.Exit(code=1)

    if as_json:
        console.print_json(json.dumps(report.model_dump(by_alias=True)))
        return
    console.print(render.po_issues_table(report))
    if report.issues:
        print_warning(f"{len(report.issues)} issue(s) found")
    else:
        print_success("No issues found")


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", help="Host to bind to")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Port to bind to")] = 8000,
    reload: Annotated[bool, typer.Option("--reload", help="Enable auto-reload (development)")] = False,
):
    """Start the HTTP API server."""
    import uvicorn

    uvicorn.run("odootools.api.main:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    app()
