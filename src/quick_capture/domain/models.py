from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

EntityName = Annotated[str, Field(min_length=1)]


class DomainModel(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class FrozenDomainModel(DomainModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class SuggestedType(StrEnum):
    task = "task"
    note = "note"


class SuggestedPriority(StrEnum):
    low = "low"
    medium = "medium"
    high = "high"


class MarkerType(StrEnum):
    tag = "tag"
    project = "project"


class Tag(DomainModel):
    uid: str | None = None
    name: EntityName


class Project(DomainModel):
    uid: str | None = None
    name: EntityName


class ParseResult(DomainModel):
    tags: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    cleaned_content: str
    raw_content: str


class AnalysisResult(DomainModel):
    """Outcome of analysing one captured line.

    The first five fields form the analyze wire contract; the rest carry the
    metadata combined from every matching rule and stay empty when nothing
    matched.
    """

    parsed_tags: list[str] = Field(default_factory=list)
    parsed_projects: list[str] = Field(default_factory=list)
    cleaned_content: str
    suggested_type: SuggestedType | None = None
    suggested_reason: str | None = None
    rule_id: str | None = None
    rule_name: str | None = None
    suggested_tags: list[str] = Field(default_factory=list)
    suggested_priority: SuggestedPriority | None = None
    suggested_due_date: date | None = None

    @model_validator(mode="after")
    def _validate_suggestion(self) -> AnalysisResult:
        if (self.suggested_type is None) != (self.suggested_reason is None):
            raise ValueError("suggested_type and suggested_reason must be set together")
        return self


class EntityRef(DomainModel):
    kind: MarkerType
    name: EntityName
    uid: str | None = None
    created: bool = False


class ProvisioningIssue(DomainModel):
    kind: MarkerType
    name: EntityName
    message: str


class ProvisioningResult(DomainModel):
    tag_refs: list[EntityRef] = Field(default_factory=list)
    project_refs: list[EntityRef] = Field(default_factory=list)
    errors: list[ProvisioningIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
