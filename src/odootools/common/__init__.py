from .errors import (
    ErrorCode,
    OdooToolsError,
    AuthenticationError,
    RemoteCallError,
    SetupError,
    TriggerError,
    StatementError,
    ResultParseError,
    QueryTimeoutError,
    NotFoundError,
    InvalidInputError,
)
from .fallible import best_effort

__all__ = [
    "ErrorCode",
    "OdooToolsError",
    "AuthenticationError",
    "RemoteCallError",
    "SetupError",
    "TriggerError",
    "StatementError",
    "ResultParseError",
    "QueryTimeoutError",
    "NotFoundError",
    "InvalidInputError",
    "best_effort",
]
