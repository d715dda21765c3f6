"""
Remote Session: authenticated access to one Odoo database over JSON-RPC.

A session wraps an immutable ``Connection``, logs in lazily, caches the
resulting user id and exposes ``invoke`` (Odoo's ``execute_kw``) for every
other remote operation. Each session owns its own request-id counter; two
sessions never share mutable state.
"""
from __future__ import annotations

import asyncio
import itertools
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from odootools.common.errors import AuthenticationError, RemoteCallError
from odootools.common.logger import get_logger
from odootools.common.settings import settings
from odootools.rpc.models import Connection, RpcErrorBody, RpcRequest

logger = get_logger("rpc_session")


class RemoteSession:
    """Authenticated JSON-RPC session against one Odoo database.

    Args:
        connection: Where and as whom to connect.
        client: Optional pre-built ``httpx.AsyncClient``. When omitted the
            session builds one and closes it in ``aclose``.
        timeout: Per-request timeout in seconds (defaults to settings).
    """

    def __init__(
        self,
        connection: Connection,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.connection = connection
        self.uid: Optional[int] = None
        self._request_ids = itertools.count(1)
        self._login_lock = asyncio.Lock()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.rpc_timeout_sec,
            verify=settings.verify_ssl,
        )

    def __str__(self) -> str:
        return str(self.connection)

    async def __aenter__(self) -> "RemoteSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def authenticate(self) -> int:
        """Logs in once and returns the cached user id on later calls."""
        if self.uid is not None:
            return self.uid

        async with self._login_lock:
            if self.uid is not None:
                return self.uid

            conn = self.connection
            uid = await self._call(
                "common",
                "login",
                [conn.db, conn.username, conn.password.get_secret_value()],
            )
            if not isinstance(uid, int) or isinstance(uid, bool):
                raise AuthenticationError(f"Authentication failed for {self}")

            logger.info(f"Authenticated on {self} with uid {uid}")
            self.uid = uid
            return uid

    async def invoke(
        self,
        model: str,
        method: str,
        args: Optional[List[Any]] = None,
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Calls ``method`` on ``model`` through Odoo's ``execute_kw``."""
        uid = self.uid if self.uid is not None else await self.authenticate()
        conn = self.connection
        return await self._call(
            "object",
            "execute_kw",
            [
                conn.db,
                uid,
                conn.password.get_secret_value(),
                model,
                method,
                args or [],
                kwargs or {},
            ],
        )

    async def _call(self, service: str, method: str, args: List[Any]) -> Any:
        request = RpcRequest(
            id=next(self._request_ids),
            params={"service": service, "method": method, "args": args},
        )

        try:
            response = await self._client.post(
                self.connection.endpoint,
                json=request.model_dump(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise RemoteCallError(f"Request to {self.connection.url} failed: {exc}") from exc

        if not response.is_success:
            raise RemoteCallError(
                f"Request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteCallError("Remote server returned a non-JSON response") from exc

        if not isinstance(body, dict):
            raise RemoteCallError("Remote server returned an unexpected JSON-RPC envelope")

        if body.get("error") is not None:
            try:
                error = RpcErrorBody.model_validate(body["error"])
            except ValidationError:
                error = RpcErrorBody(message=str(body["error"]))
            raise RemoteCallError(error.describe(), details=error.code)

        if "result" not in body:
            raise RemoteCallError("Remote server returned an unexpected JSON-RPC envelope")
        return body["result"]
