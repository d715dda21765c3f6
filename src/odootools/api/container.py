from typing import Optional

import httpx

from odootools.common.settings import Settings, settings as default_settings


class Container:
    """Process-wide resources shared by every request."""

    def __init__(self, config: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = config or default_settings
        self.http_client = httpx.AsyncClient(
            timeout=self.settings.rpc_timeout_sec,
            verify=self.settings.verify_ssl,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()
