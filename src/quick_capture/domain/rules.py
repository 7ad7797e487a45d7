from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field

from quick_capture.domain.models import FrozenDomainModel, SuggestedPriority, SuggestedType

RuleId = Annotated[str, Field(min_length=1, pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")]


class ComparisonOperator(StrEnum):
    eq = "eq"
    gt = "gt"
    gte = "gte"
    lt = "lt"
    lte = "lte"


class TextTarget(StrEnum):
    raw = "raw"
    cleaned = "cleaned"


class DueDateKind(StrEnum):
    none = "none"
    relative = "relative"
    extracted = "extracted"


class HasProjectCondition(FrozenDomainModel):
    type: Literal["has_project"] = "has_project"
    value: bool = True


class HasTagCondition(FrozenDomainModel):
    type: Literal["has_tag"] = "has_tag"
    value: Annotated[str, Field(min_length=1)]


class ProjectNameMatchesCondition(FrozenDomainModel):
    type: Literal["project_name_matches"] = "project_name_matches"
    value: Annotated[str, Field(min_length=1)]


class TagCountCondition(FrozenDomainModel):
    type: Literal["tag_count"] = "tag_count"
    value: Annotated[int, Field(ge=0)]
    operator: ComparisonOperator = ComparisonOperator.eq


class StartsWithVerbCondition(FrozenDomainModel):
    type: Literal["starts_with_verb"] = "starts_with_verb"
    value: bool = True


class TextLengthCondition(FrozenDomainModel):
    """Word count of the cleaned text compared against ``value``."""

    type: Literal["text_length"] = "text_length"
    value: Annotated[int, Field(ge=0)]
    operator: ComparisonOperator = ComparisonOperator.eq


class ContainsUrlCondition(FrozenDomainModel):
    type: Literal["contains_url"] = "contains_url"
    value: bool = True


class IsBareUrlCondition(FrozenDomainModel):
    type: Literal["is_bare_url"] = "is_bare_url"
    value: bool = True


class ContainsKeywordsCondition(FrozenDomainModel):
    type: Literal["contains_keywords", "contains_priority_keywords"] = "contains_keywords"
    value: list[str] = Field(default_factory=list)


class ContainsTimeReferenceCondition(FrozenDomainModel):
    type: Literal["contains_time_reference"] = "contains_time_reference"
    value: bool = True


class IsQuestionCondition(FrozenDomainModel):
    type: Literal["is_question"] = "is_question"
    value: bool = True


class IsLongTextCondition(FrozenDomainModel):
    type: Literal["is_long_text"] = "is_long_text"
    value: bool = True


class ContainsCodeCondition(FrozenDomainModel):
    type: Literal["contains_code"] = "contains_code"
    value: bool = True


class MatchesRegexCondition(FrozenDomainModel):
    type: Literal["matches_regex"] = "matches_regex"
    pattern: str | None = None
    target: TextTarget = TextTarget.raw
    ignore_case: bool = True


class AnyOfCondition(FrozenDomainModel):
    type: Literal["any_of"] = "any_of"
    conditions: Annotated[list[Condition], Field(min_length=1)]


class AllOfCondition(FrozenDomainModel):
    type: Literal["all_of"] = "all_of"
    conditions: Annotated[list[Condition], Field(min_length=1)]


Condition = Annotated[
    HasProjectCondition
    | HasTagCondition
    | ProjectNameMatchesCondition
    | TagCountCondition
    | StartsWithVerbCondition
    | TextLengthCondition
    | ContainsUrlCondition
    | IsBareUrlCondition
    | ContainsKeywordsCondition
    | ContainsTimeReferenceCondition
    | IsQuestionCondition
    | IsLongTextCondition
    | ContainsCodeCondition
    | MatchesRegexCondition
    | AnyOfCondition
    | AllOfCondition,
    Field(discriminator="type"),
]

AnyOfCondition.model_rebuild()
AllOfCondition.model_rebuild()


class DueDateSpec(FrozenDomainModel):
    type: DueDateKind = DueDateKind.none
    value: str | None = None


class RuleAction(FrozenDomainModel):
    suggested_type: SuggestedType
    suggested_reason: Annotated[str, Field(min_length=1)]
    suggested_tags: list[str] = Field(default_factory=list)
    suggested_priority: SuggestedPriority | None = None
    suggested_due_date: DueDateSpec | None = None


class ClassificationRule(FrozenDomainModel):
    id: RuleId
    name: Annotated[str, Field(min_length=1)]
    description: str | None = None
    priority: int = 0
    examples: list[str] = Field(default_factory=list)
    conditions: Annotated[list[Condition], Field(min_length=1)]
    action: RuleAction

    def condition_types(self) -> list[str]:
        """Leaf condition types in declaration order, descending into groups."""
        return _leaf_types(self.conditions)


def _leaf_types(conditions: list[Condition]) -> list[str]:
    out: list[str] = []
    for condition in conditions:
        if isinstance(condition, AnyOfCondition | AllOfCondition):
            out.extend(_leaf_types(condition.conditions))
        else:
            out.append(condition.type)
    return out
