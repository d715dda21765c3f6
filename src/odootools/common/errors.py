from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes surfaced to callers of the toolkit."""
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    REMOTE_CALL_FAILED = "REMOTE_CALL_FAILED"
    JOB_SETUP_FAILED = "JOB_SETUP_FAILED"
    JOB_TRIGGER_FAILED = "JOB_TRIGGER_FAILED"
    STATEMENT_FAILED = "STATEMENT_FAILED"
    RESULT_PARSE_FAILED = "RESULT_PARSE_FAILED"
    EXECUTION_TIMEOUT = "EXECUTION_TIMEOUT"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class OdooToolsError(Exception):
    """Base class of every error raised by the toolkit.

    Attributes:
        message (str): A human-readable error message.
        error_code (ErrorCode): The standardized error code.
        details (Optional[Any]): Additional context or metadata.
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        """Returns the single-message failure body used by the HTTP layer."""
        payload: Dict[str, Any] = {"error": self.message, "code": self.error_code.value}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class AuthenticationError(OdooToolsError):
    """Login did not yield a usable numeric identity."""
    error_code = ErrorCode.AUTHENTICATION_FAILED


class RemoteCallError(OdooToolsError):
    """The JSON-RPC transport returned an error envelope or a non-2xx status."""
    error_code = ErrorCode.REMOTE_CALL_FAILED

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class SetupError(OdooToolsError):
    """The scheduled job could not be prepared on the remote side."""
    error_code = ErrorCode.JOB_SETUP_FAILED


class TriggerError(RemoteCallError):
    """Immediate execution of the scheduled job failed at the transport level."""
    error_code = ErrorCode.JOB_TRIGGER_FAILED


class StatementError(OdooToolsError):
    """The statement raised on the remote server."""
    error_code = ErrorCode.STATEMENT_FAILED

    def __init__(self, message: str, *, statement: Optional[str] = None):
        super().__init__(message)
        self.statement = statement


class ResultParseError(OdooToolsError):
    """The result payload was present but is not valid structured data."""
    error_code = ErrorCode.RESULT_PARSE_FAILED


class QueryTimeoutError(OdooToolsError, TimeoutError):
    """Neither the result nor the error key appeared before the deadline."""
    error_code = ErrorCode.EXECUTION_TIMEOUT

    def __init__(self, timeout_ms: int):
        super().__init__(f"Query timeout after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class NotFoundError(OdooToolsError):
    """A record looked up by the inspection reports does not exist."""
    error_code = ErrorCode.NOT_FOUND


class InvalidInputError(OdooToolsError):
    """Locally supplied input (e.g. a translation file) cannot be used."""
    error_code = ErrorCode.INVALID_INPUT
