from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import Request

from odootools.api.models import ConnectionRequest
from odootools.rpc.session import RemoteSession


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.container.http_client


@asynccontextmanager
async def open_session(request: Request, payload: ConnectionRequest) -> AsyncIterator[RemoteSession]:
    """One RemoteSession per logical operation, sharing the app's HTTP pool."""
    async with RemoteSession(payload.to_connection(), client=get_http_client(request)) as session:
        yield session
