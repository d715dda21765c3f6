"""
Contract definitions for remote statement execution.

These Pydantic models describe what travels through the side-channel
parameters written by the scheduled job, and what is handed back to callers.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QueryResult(BaseModel):
    """Outcome of one successful statement run."""

    statement: str = Field(..., description="The statement as it was executed.")
    columns: List[str] = Field(default_factory=list, description="Result column names, in order.")
    rows: List[List[Optional[str]]] = Field(
        default_factory=list, description="Result rows with every cell coerced to text or null."
    )
    row_count: int = Field(
        ..., description="Result-set size, or the affected-row count for statements without rows."
    )
    affected_row_count: int = Field(..., description="Cursor rowcount reported by the engine.")
    status_message: Optional[str] = Field(None, description="Engine status message, when available.")
    executed_at: Optional[str] = Field(None, description="Server timestamp taken right after execution.")
    dry_run: bool = Field(..., description="True when the statement's effects were rolled back.")

    model_config = ConfigDict(frozen=True, extra="ignore")


class ErrorPayload(BaseModel):
    """Error record written by the scheduled job when the statement raised."""

    statement: Optional[str] = None
    error_message: str

    model_config = ConfigDict(extra="ignore")


class RunState(str, Enum):
    """Lifecycle of one statement run."""
    IDLE = "idle"
    AUTHENTICATED = "authenticated"
    COMPILED = "compiled"
    CREATED = "created"
    TRIGGERED = "triggered"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CLEANED_UP = "cleaned_up"


TERMINAL_STATES = {RunState.SUCCEEDED, RunState.FAILED, RunState.TIMED_OUT}
