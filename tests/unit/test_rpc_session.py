import json

import httpx
import pytest

from odootools.common.errors import AuthenticationError, RemoteCallError
from odootools.rpc.models import Connection, RpcErrorBody, normalize_url
from odootools.rpc.session import RemoteSession


def _session(handler, connection):
    return RemoteSession(connection, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_normalize_url_defaults_scheme_and_strips_slash():
    assert normalize_url("odoo.test/") == "https://odoo.test"
    assert normalize_url("http://localhost:8069") == "http://localhost:8069"
    assert normalize_url("  https://erp.example.com/ ") == "https://erp.example.com"


def test_connection_endpoint_and_secret():
    conn = Connection(url="odoo.test", db="demo", username="admin", password="s3cret")
    assert conn.endpoint == "https://odoo.test/jsonrpc"
    assert "s3cret" not in repr(conn)
    assert str(conn) == "admin@https://odoo.test/demo"


def test_error_body_prefers_data_message():
    assert RpcErrorBody(message="Odoo Server Error", data={"message": "boom", "debug": "tb"}).describe() == "boom"
    assert RpcErrorBody(message="Odoo Server Error", data={"debug": "tb"}).describe() == "tb"
    assert RpcErrorBody(message="Odoo Server Error", data="plain").describe() == "plain"
    assert RpcErrorBody(message="Odoo Server Error").describe() == "Odoo Server Error"
    assert RpcErrorBody().describe() == "Error"


@pytest.mark.asyncio
async def test_authenticate_is_cached(fake_odoo, connection):
    session = fake_odoo.session(connection)

    assert await session.authenticate() == 2
    assert await session.authenticate() == 2
    assert fake_odoo.calls == [("common", "login")]


@pytest.mark.asyncio
async def test_authenticate_rejects_false(fake_odoo):
    session = fake_odoo.session(Connection(url="odoo.test", db="demo", username="admin", password="wrong"))

    with pytest.raises(AuthenticationError):
        await session.authenticate()
    assert session.uid is None


@pytest.mark.asyncio
async def test_invoke_sends_execute_kw_envelope(connection):
    sent = []

    def handler(request):
        body = json.loads(request.content)
        sent.append(body)
        if body["params"]["service"] == "common":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": 9})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": [1, 2]})

    session = _session(handler, connection)
    result = await session.invoke("res.partner", "search", [[["active", "=", True]]], {"limit": 2})

    assert result == [1, 2]
    login, call = sent
    assert login["method"] == "call"
    assert login["params"]["args"] == ["demo", "admin", "admin"]
    assert call["params"]["service"] == "object"
    assert call["params"]["method"] == "execute_kw"
    assert call["params"]["args"] == [
        "demo", 9, "admin", "res.partner", "search", [[["active", "=", True]]], {"limit": 2}
    ]
    assert call["id"] > login["id"]


@pytest.mark.asyncio
async def test_error_envelope_raises_remote_call_error(fake_odoo, connection):
    fake_odoo.failures[("res.partner", "read")] = "Access denied"
    session = fake_odoo.session(connection)

    with pytest.raises(RemoteCallError) as exc_info:
        await session.invoke("res.partner", "read", [[1]])
    assert exc_info.value.message == "Access denied"


@pytest.mark.asyncio
async def test_http_status_error(connection):
    session = _session(lambda request: httpx.Response(502, text="Bad gateway"), connection)

    with pytest.raises(RemoteCallError) as exc_info:
        await session.authenticate()
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_non_json_body(connection):
    session = _session(lambda request: httpx.Response(200, text="<html>maintenance</html>"), connection)

    with pytest.raises(RemoteCallError, match="non-JSON"):
        await session.authenticate()


@pytest.mark.asyncio
async def test_missing_result_member(connection):
    session = _session(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1}), connection)

    with pytest.raises(RemoteCallError, match="envelope"):
        await session.authenticate()


@pytest.mark.asyncio
async def test_transport_failure(connection):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    session = _session(handler, connection)

    with pytest.raises(RemoteCallError, match="failed"):
        await session.authenticate()
