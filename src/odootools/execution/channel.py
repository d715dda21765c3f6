from __future__ import annotations

from typing import List, Optional

from odootools.common.fallible import best_effort
from odootools.rpc.session import RemoteSession

PARAMETER_MODEL = "ir.config_parameter"


class ParameterChannel:
    """Side channel over ``ir.config_parameter`` used to relay job outcomes."""

    def __init__(self, session: RemoteSession):
        self.session = session

    async def read(self, key: str) -> Optional[str]:
        """Returns the stored text, or None when absent or unreadable.

        A failed lookup is reported as "absent" so a transient fault never
        aborts a poll loop.
        """
        value = await best_effort(
            self.session.invoke(PARAMETER_MODEL, "get_param", [key], {"default": False}),
            what=f"reading parameter {key}",
        )
        if not value or not isinstance(value, str):
            return None
        return value

    async def find(self, key: str) -> List[int]:
        ids = await self.session.invoke(PARAMETER_MODEL, "search", [[["key", "=", key]]])
        return list(ids or [])

    async def delete(self, key: str) -> bool:
        """Removes every parameter record stored under ``key``.

        Returns True when at least one record was deleted. Raises on transport
        failure; callers on the cleanup path wrap it in ``best_effort``.
        """
        ids = await self.find(key)
        if not ids:
            return False
        await self.session.invoke(PARAMETER_MODEL, "unlink", [ids])
        return True
