import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


def normalize_url(url: str) -> str:
    """Defaults the scheme to https and strips one trailing slash."""
    normalized = url.strip()
    if not normalized.startswith(("http://", "https://")):
        normalized = f"https://{normalized}"
    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


class Connection(BaseModel):
    """Parameters identifying one remote Odoo database and its credentials."""

    url: str = Field(..., min_length=1, description="Base URL of the Odoo server.")
    db: str = Field(..., min_length=1, description="Database name.")
    username: str = Field(..., min_length=1, description="Login used to authenticate.")
    password: SecretStr = Field(..., description="Password or API key.")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_url(value)

    @property
    def endpoint(self) -> str:
        return f"{self.url}/jsonrpc"

    def __str__(self) -> str:
        return f"{self.username}@{self.url}/{self.db}"


class RpcRequest(BaseModel):
    """JSON-RPC 2.0 envelope of the Odoo ``call`` method."""

    jsonrpc: str = "2.0"
    id: int
    method: str = "call"
    params: Dict[str, Any]


class RpcErrorBody(BaseModel):
    code: Optional[int] = None
    message: Optional[str] = None
    data: Optional[Any] = None

    model_config = ConfigDict(extra="ignore")

    def describe(self) -> str:
        """Picks the most useful human-readable text out of an Odoo error."""
        if self.data:
            if isinstance(self.data, dict):
                detail = self.data.get("message") or self.data.get("debug")
                if detail:
                    return str(detail)
            return self.data if isinstance(self.data, str) else json.dumps(self.data, default=str)
        return self.message or "Error"
