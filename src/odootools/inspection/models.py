from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ModuleInfo(BaseModel):
    name: str
    display_name: Optional[str] = None
    state: Optional[str] = None
    installed_version: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ModuleVersionDiff(BaseModel):
    name: str
    env1_version: Optional[str] = None
    env2_version: Optional[str] = None


class ModuleComparison(BaseModel):
    only_in_env1: List[ModuleInfo] = Field(default_factory=list)
    only_in_env2: List[ModuleInfo] = Field(default_factory=list)
    common: List[ModuleInfo] = Field(default_factory=list)
    version_diff: List[ModuleVersionDiff] = Field(default_factory=list)


class RecordCount(BaseModel):
    model: str
    domain: List[Any]
    count: int


class Permissions(BaseModel):
    read: bool = False
    write: bool = False
    create: bool = False
    unlink: bool = False

    def merge(self, other: "Permissions") -> "Permissions":
        return Permissions(
            read=self.read or other.read,
            write=self.write or other.write,
            create=self.create or other.create,
            unlink=self.unlink or other.unlink,
        )

    @property
    def any(self) -> bool:
        return self.read or self.write or self.create or self.unlink


class ModelAccess(Permissions):
    model: str
    model_name: str


class UserRef(BaseModel):
    id: int
    name: str
    login: str


class AccessReport(BaseModel):
    user_id: int
    user_name: str
    user_login: str
    access_rights: List[ModelAccess] = Field(default_factory=list)
    total_models: int = 0
    models_with_access: int = 0


class AccessDifference(BaseModel):
    model: str
    model_name: str
    user1: Permissions
    user2: Permissions


class AccessComparison(BaseModel):
    user1: UserRef
    user2: UserRef
    only_user1: List[ModelAccess] = Field(default_factory=list)
    only_user2: List[ModelAccess] = Field(default_factory=list)
    different: List[AccessDifference] = Field(default_factory=list)
    identical_count: int = 0


class GroupRef(BaseModel):
    id: int
    name: str


class GroupInsight(BaseModel):
    id: int
    name: str
    technical_name: Optional[str] = None
    category: Optional[GroupRef] = None
    implied_groups: List[GroupRef] = Field(default_factory=list)
    implied_count: int = 0
    users_count: int = 0
    access_rights: List[ModelAccess] = Field(default_factory=list)
    notes: Optional[str] = None


class GroupTotals(BaseModel):
    groups: int = 0
    implied_groups: int = 0
    models_with_access: int = 0


class GroupInsightReport(BaseModel):
    user: UserRef
    groups: List[GroupInsight] = Field(default_factory=list)
    totals: GroupTotals = Field(default_factory=GroupTotals)


PoIssueType = Literal["missing", "placeholder", "duplicate", "duplicateReference"]


class PoIssue(BaseModel):
    type: PoIssueType
    msgid: str
    msgctxt: Optional[str] = None
    details: str


class PoStats(BaseModel):
    total_entries: int = Field(0, serialization_alias="totalEntries")
    translated: int = 0
    missing: int = 0
    duplicates: int = 0


class PoValidationReport(BaseModel):
    stats: PoStats = Field(default_factory=PoStats)
    issues: List[PoIssue] = Field(default_factory=list)
