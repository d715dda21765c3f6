import ast
import itertools
import json
import re

import httpx
import pytest

from odootools.rpc.models import Connection
from odootools.rpc.session import RemoteSession

_SCRIPT_LITERAL = re.compile(r"^(statement|result_key|error_key|savepoint|commit_changes) = (.+)$", re.MULTILINE)


class OdooFault(Exception):
    """Raised by fake handlers; turned into a JSON-RPC error envelope."""


def job_literals(job):
    """Reads back the literals a compiled job script was rendered with."""
    return {name: ast.literal_eval(value) for name, value in _SCRIPT_LITERAL.findall(job["code"])}


class FakeOdoo:
    """In-memory Odoo server speaking the JSON-RPC ``call`` protocol.

    ``method_direct_trigger`` hands the job to ``on_trigger``, which by
    default publishes a successful result under the job's result key.
    """

    def __init__(self, db="demo", login="admin", password="admin", uid=2):
        self.db = db
        self.login = login
        self.password = password
        self.uid = uid

        self.calls = []
        self.failures = {}
        self.overrides = {}
        self._ids = itertools.count(100)

        self.models = {
            1: {"id": 1, "model": "ir.cron", "name": "Scheduled Actions"},
            2: {"id": 2, "model": "res.partner", "name": "Contact"},
            3: {"id": 3, "model": "res.users", "name": "User"},
            4: {"id": 4, "model": "res.company", "name": "Companies"},
        }
        self.crons = {}
        self.triggered = []
        self.params = {}
        self.param_ids = {}
        self.users = []
        self.groups = []
        self.access = []
        self.modules = []
        self.counts = {}

        self.on_trigger = self.publish_result
        self.result_rows = [["1", "Administrator"]]
        self._pending = None

    # transport

    @property
    def transport(self):
        return httpx.MockTransport(self.handle)

    def client(self):
        return httpx.AsyncClient(transport=self.transport)

    def session(self, connection):
        return RemoteSession(connection, client=self.client())

    def handle(self, request):
        body = json.loads(request.content)
        params = body["params"]
        try:
            result = self.dispatch(params["service"], params["method"], params["args"])
        except OdooFault as exc:
            error = {
                "code": 200,
                "message": "Odoo Server Error",
                "data": {"name": "odoo.exceptions.UserError", "message": str(exc), "debug": "Traceback"},
            }
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def dispatch(self, service, method, args):
        if service == "common" and method == "login":
            self.calls.append(("common", "login"))
            return self.uid if list(args) == [self.db, self.login, self.password] else False

        db, uid, password, model, model_method, m_args, m_kwargs = args
        self.calls.append((model, model_method))
        key = (model, model_method)
        if key in self.failures:
            raise OdooFault(self.failures[key])
        if key in self.overrides:
            value = self.overrides[key]
            return value(*m_args, **m_kwargs) if callable(value) else value
        if model_method == "search_count":
            return self.counts.get(model, 0)

        handler = getattr(self, "_%s_%s" % (model.replace(".", "_"), model_method))
        return handler(*m_args, **m_kwargs)

    def remote_calls(self, model=None):
        return [c for c in self.calls if model is None or c[0] == model]

    # job side

    def publish_result(self, job):
        literals = job_literals(job)
        payload = {
            "statement": literals["statement"],
            "columns": ["id", "name"],
            "rows": self.result_rows,
            "row_count": len(self.result_rows),
            "affected_row_count": len(self.result_rows),
            "status_message": "SELECT %d" % len(self.result_rows),
            "executed_at": "2026-10-19 12:00:00.000000+00:00",
            "dry_run": not literals["commit_changes"],
        }
        self.params[literals["result_key"]] = json.dumps(payload)
        self.param_ids[literals["result_key"]] = next(self._ids)

    def publish_raw(self, job, text):
        self._ir_config_parameter_set_param(job_literals(job)["result_key"], text)

    def publish_error(self, job, message, reraise=True):
        literals = job_literals(job)
        payload = {"statement": literals["statement"], "error_message": message}
        self.params[literals["error_key"]] = json.dumps(payload)
        self.param_ids[literals["error_key"]] = next(self._ids)
        if reraise:
            raise OdooFault(message)

    def publish_after(self, reads):
        """Publishes the result only after ``reads`` result-key reads."""
        def _defer(job):
            self._pending = [job, reads]
        self.on_trigger = _defer

    # ir.model

    def _ir_model_search(self, domain, limit=None):
        ids = [
            m["id"] for m in self.models.values()
            if not domain or all(m.get(f) == v for f, _, v in domain)
        ]
        return ids[:limit] if limit else ids

    def _ir_model_read(self, ids, fields=None):
        return [self.models[i] for i in ids if i in self.models]

    # ir.cron

    def _ir_cron_create(self, values):
        job_id = next(self._ids)
        self.crons[job_id] = dict(values, id=job_id)
        return job_id

    def _ir_cron_unlink(self, ids):
        for job_id in ids:
            self.crons.pop(job_id, None)
        return True

    def _ir_cron_method_direct_trigger(self, ids):
        job = self.crons[ids[0]]
        self.triggered.append(job)
        self.on_trigger(job)
        return True

    # ir.config_parameter

    def _ir_config_parameter_get_param(self, key, default=False):
        if self._pending is not None and key == job_literals(self._pending[0])["result_key"]:
            self._pending[1] -= 1
            if self._pending[1] <= 0:
                job, self._pending = self._pending[0], None
                self.publish_result(job)
        return self.params.get(key, default)

    def _ir_config_parameter_set_param(self, key, value):
        self.params[key] = value
        self.param_ids.setdefault(key, next(self._ids))
        return True

    def _ir_config_parameter_search(self, domain):
        key = domain[0][2]
        return [self.param_ids[key]] if key in self.params else []

    def _ir_config_parameter_unlink(self, ids):
        for key, param_id in list(self.param_ids.items()):
            if param_id in ids:
                del self.param_ids[key]
                self.params.pop(key, None)
        return True

    # res.users / res.groups / ir.model.access

    def _res_users_search(self, domain, limit=None):
        login = domain[0][2]
        return [u["id"] for u in self.users if u["login"] == login][:limit]

    def _res_users_read(self, ids, fields=None):
        return [u for u in self.users if u["id"] in ids]

    def _res_groups_search(self, domain):
        user_id = domain[0][2][0]
        return [g["id"] for g in self.groups if user_id in g.get("users", [])]

    def _res_groups_read(self, ids, fields=None):
        return [g for g in self.groups if g["id"] in ids]

    def _ir_model_access_search(self, domain):
        field, operator, value = domain[0]
        if operator == "in":
            return [a["id"] for a in self.access if a["group_id"] and a["group_id"][0] in value]
        return [a["id"] for a in self.access if not a["group_id"]]

    def _ir_model_access_read(self, ids, fields=None):
        return [a for a in self.access if a["id"] in ids]

    # ir.module.module

    def _ir_module_module_search_read(self, domain, fields=None, order=None):
        modules = [m for m in self.modules if all(m.get(f) == v for f, _, v in domain)]
        return [{k: m.get(k, False) for k in fields} for m in modules]


@pytest.fixture
def fake_odoo():
    return FakeOdoo()


@pytest.fixture
def connection():
    return Connection(url="odoo.test", db="demo", username="admin", password="admin")


@pytest.fixture
def populated_odoo(fake_odoo):
    """A fake server with two users, three groups and a few access rows."""
    fake_odoo.users = [
        {"id": 2, "name": "Administrator", "login": "admin", "groups_id": [10, 11]},
        {"id": 7, "name": "Marc Demo", "login": "demo", "groups_id": False},
    ]
    fake_odoo.groups = [
        {
            "id": 10, "name": "Sales / User", "display_name": "Sales / User",
            "category_id": [5, "Sales"], "implied_ids": [12], "users": [2, 7], "comment": False,
        },
        {
            "id": 11, "name": "Settings", "display_name": "Administration / Settings",
            "category_id": False, "implied_ids": [], "users": [2], "comment": "Full access",
        },
        {
            "id": 12, "name": "Internal User", "display_name": "User types / Internal User",
            "category_id": [6, "User types"], "implied_ids": [], "users": [2, 7], "comment": False,
        },
    ]
    fake_odoo.access = [
        {"id": 1, "group_id": [10, "Sales / User"], "model_id": [2, "Contact"],
         "perm_read": True, "perm_write": False, "perm_create": False, "perm_unlink": False},
        {"id": 2, "group_id": [11, "Settings"], "model_id": [2, "Contact"],
         "perm_read": False, "perm_write": True, "perm_create": True, "perm_unlink": False},
        {"id": 3, "group_id": [11, "Settings"], "model_id": [4, "Companies"],
         "perm_read": True, "perm_write": True, "perm_create": True, "perm_unlink": True},
        {"id": 4, "group_id": False, "model_id": [3, "User"],
         "perm_read": True, "perm_write": False, "perm_create": False, "perm_unlink": False},
        {"id": 5, "group_id": [12, "Internal User"], "model_id": [2, "Contact"],
         "perm_read": True, "perm_write": False, "perm_create": False, "perm_unlink": False},
    ]
    return fake_odoo


@pytest.fixture
def odoo_factory():
    return FakeOdoo
