from .contracts import ErrorPayload, QueryResult, RunState
from .compiler import StatementCompiler
from .orchestrator import JobOrchestrator, StatementRun
from .poller import ResultPoller
from .cleanup import CleanupGuarantor
from .channel import ParameterChannel
from .tokens import RunKeys, new_token
from .service import execute_statement

__all__ = [
    "ErrorPayload",
    "QueryResult",
    "RunState",
    "StatementCompiler",
    "JobOrchestrator",
    "StatementRun",
    "ResultPoller",
    "CleanupGuarantor",
    "ParameterChannel",
    "RunKeys",
    "new_token",
    "execute_statement",
]
