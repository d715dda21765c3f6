from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

from odootools.common.settings import Settings, settings as default_settings


def new_token() -> str:
    """Returns a fresh 128-bit run token made of lowercase hex digits.

    Hex keeps the token usable verbatim inside a savepoint identifier.
    """
    return secrets.token_hex(16)


@dataclass(frozen=True)
class RunKeys:
    """Every name derived from one run token."""

    token: str
    result_key: str
    error_key: str
    savepoint: str
    job_name: str

    @classmethod
    def for_token(cls, token: str, config: Optional[Settings] = None) -> "RunKeys":
        config = config or default_settings
        return cls(
            token=token,
            result_key=f"{config.result_key_prefix}.{token}",
            error_key=f"{config.error_key_prefix}.{token}",
            savepoint=f"{config.savepoint_prefix}{token}",
            job_name=f"{config.job_name_prefix} {token}",
        )

    @property
    def storage_keys(self):
        return (self.result_key, self.error_key)
