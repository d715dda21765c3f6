import ast
import json

import pytest

from odootools.execution.compiler import StatementCompiler
from odootools.execution.contracts import QueryResult
from odootools.execution.script_template import TEMPLATE_VERSION
from odootools.execution.tokens import RunKeys, new_token


class FakeCursor:
    """Records every statement; answers the statement under test with fixed rows."""

    def __init__(self, columns=None, rows=None, rowcount=None, fail_on=None):
        self.columns = columns
        self.rows = rows or []
        self.rowcount = rowcount if rowcount is not None else len(self.rows)
        self.fail_on = fail_on
        self.executed = []
        self.description = None
        self.statusmessage = None
        self._now = None

    def execute(self, query):
        self.executed.append(query)
        if query == self.fail_on:
            raise RuntimeError('relation "nope" does not exist')
        if query == "SELECT NOW()":
            self._now = ("2026-10-19 12:00:00+00:00",)
            return
        if query.startswith(("SAVEPOINT", "RELEASE", "ROLLBACK")):
            return
        self.description = [(name, None) for name in self.columns] if self.columns else None
        self.statusmessage = "SELECT %d" % len(self.rows) if self.columns else "UPDATE %d" % self.rowcount

    def fetchall(self):
        return self.rows

    def fetchone(self):
        return self._now


class FakeParameters:
    def __init__(self):
        self.values = {}

    def sudo(self):
        return self

    def set_param(self, key, value):
        self.values[key] = value


class FakeEnv(dict):
    def __init__(self, cr):
        super().__init__({"ir.config_parameter": FakeParameters()})
        self.cr = cr


def _keys():
    return RunKeys.for_token(new_token())


def _run_script(script, cursor):
    env = FakeEnv(cursor)
    exec(compile(script, "<job>", "exec"), {"env": env})
    return env["ir.config_parameter"].values


def test_statement_enters_only_as_a_literal():
    statement = "SELECT 'a''b' AS x; -- '''\nDROP TABLE x; \"\"\" $commit"
    keys = _keys()
    script = StatementCompiler().compile(statement, keys, commit=False)

    assignments = {
        node.targets[0].id: ast.literal_eval(node.value)
        for node in ast.parse(script).body
        if isinstance(node, ast.Assign) and isinstance(node.value, ast.Constant)
    }
    assert assignments["statement"] == statement
    assert assignments["result_key"] == keys.result_key
    assert assignments["error_key"] == keys.error_key
    assert assignments["savepoint"] == keys.savepoint
    assert assignments["commit_changes"] is False
    assert f"template v{TEMPLATE_VERSION}" in script


def test_rejects_empty_statement():
    with pytest.raises(ValueError):
        StatementCompiler().compile("   ", _keys(), commit=False)


def test_rejects_unsafe_savepoint_name():
    keys = RunKeys(token="t", result_key="r", error_key="e", savepoint="sp; DROP", job_name="j")
    with pytest.raises(ValueError, match="identifier"):
        StatementCompiler().compile("SELECT 1", keys, commit=False)


def test_dry_run_rolls_back_and_publishes_result():
    keys = _keys()
    cursor = FakeCursor(columns=["id", "name"], rows=[(1, 'He said "hi"\n'), (2, None)])
    script = StatementCompiler().compile("SELECT id, name FROM res_partner", keys, commit=False)

    params = _run_script(script, cursor)

    assert list(params) == [keys.result_key]
    result = QueryResult.model_validate(json.loads(params[keys.result_key]))
    assert result.columns == ["id", "name"]
    assert result.rows == [["1", 'He said "hi"\n'], ["2", None]]
    assert result.row_count == 2
    assert result.dry_run is True
    assert result.executed_at == "2026-10-19 12:00:00+00:00"
    assert result.status_message == "SELECT 2"

    sp = keys.savepoint
    assert cursor.executed == [
        f"SAVEPOINT {sp}",
        "SELECT id, name FROM res_partner",
        f"SAVEPOINT {sp}_ts",
        "SELECT NOW()",
        f"RELEASE SAVEPOINT {sp}_ts",
        f"ROLLBACK TO SAVEPOINT {sp}",
        f"RELEASE SAVEPOINT {sp}",
    ]


def test_commit_releases_savepoint():
    keys = _keys()
    cursor = FakeCursor(rowcount=3)
    script = StatementCompiler().compile("UPDATE res_partner SET active = true", keys, commit=True)

    params = _run_script(script, cursor)

    result = json.loads(params[keys.result_key])
    assert result["dry_run"] is False
    assert result["columns"] == []
    assert result["rows"] == []
    assert result["row_count"] == 3
    assert result["affected_row_count"] == 3
    assert f"ROLLBACK TO SAVEPOINT {keys.savepoint}" not in cursor.executed
    assert cursor.executed[-1] == f"RELEASE SAVEPOINT {keys.savepoint}"


def test_failure_publishes_error_and_reraises():
    keys = _keys()
    cursor = FakeCursor(fail_on="SELECT * FROM nope")
    script = StatementCompiler().compile("SELECT * FROM nope", keys, commit=True)

    env = FakeEnv(cursor)
    with pytest.raises(RuntimeError):
        exec(compile(script, "<job>", "exec"), {"env": env})

    params = env["ir.config_parameter"].values
    assert list(params) == [keys.error_key]
    assert json.loads(params[keys.error_key]) == {
        "statement": "SELECT * FROM nope",
        "error_message": 'relation "nope" does not exist',
    }
    assert cursor.executed[-2:] == [
        f"ROLLBACK TO SAVEPOINT {keys.savepoint}",
        f"RELEASE SAVEPOINT {keys.savepoint}",
    ]


def test_timestamp_failure_keeps_the_result():
    keys = _keys()
    cursor = FakeCursor(columns=["x"], rows=[(1,)], fail_on="SELECT NOW()")
    script = StatementCompiler().compile("SELECT 1 AS x", keys, commit=False)

    params = _run_script(script, cursor)

    assert list(params) == [keys.result_key]
    result = json.loads(params[keys.result_key])
    assert result["executed_at"] is None
    assert result["rows"] == [["1"]]
    assert result["dry_run"] is True

    sp = keys.savepoint
    assert cursor.executed == [
        f"SAVEPOINT {sp}",
        "SELECT 1 AS x",
        f"SAVEPOINT {sp}_ts",
        "SELECT NOW()",
        f"ROLLBACK TO SAVEPOINT {sp}_ts",
        f"RELEASE SAVEPOINT {sp}_ts",
        f"ROLLBACK TO SAVEPOINT {sp}",
        f"RELEASE SAVEPOINT {sp}",
    ]
