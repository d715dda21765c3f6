from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr

from odootools.rpc.models import Connection


class ConnectionRequest(BaseModel):
    url: str = Field(..., min_length=1)
    db: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: SecretStr

    model_config = ConfigDict(extra="ignore")

    def to_connection(self) -> Connection:
        return Connection(url=self.url, db=self.db, username=self.username, password=self.password)


class ExecuteQueryRequest(ConnectionRequest):
    query: str = Field(..., min_length=1)
    apply_changes: bool = Field(
        default=False,
        validation_alias=AliasChoices("apply_changes", "applyChanges"),
        description="Commit the statement instead of rolling it back.",
    )
    timeout_ms: Optional[int] = Field(default=None, gt=0)


class CountRecordsRequest(ConnectionRequest):
    model: str = Field(..., min_length=1)
    domain: List[Any]


class UserRequest(ConnectionRequest):
    target_user: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("target_user", "targetUser"),
        description="Login of the user to inspect.",
    )


class CompareModulesRequest(BaseModel):
    env1: ConnectionRequest
    env2: ConnectionRequest


class CompareAccessRequest(BaseModel):
    env1: ConnectionRequest
    env2: ConnectionRequest
    user1: str = Field(..., min_length=1)
    user2: str = Field(..., min_length=1)


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None
    details: Optional[Any] = None


class ValidatePoRequest(BaseModel):
    content: str = Field(..., min_length=1, description="Text of the .po file.")
