# odootools package

from .rpc import Connection, RemoteSession
from .execution import QueryResult, JobOrchestrator, execute_statement
from .common.errors import (
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

__version__ = "0.1.0"

__all__ = [
    "Connection",
    "RemoteSession",
    "QueryResult",
    "JobOrchestrator",
    "execute_statement",
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
]
