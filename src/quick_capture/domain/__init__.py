"""Core domain models for quick-capture."""

from quick_capture.domain.models import (
    AnalysisResult,
    EntityRef,
    MarkerType,
    ParseResult,
    Project,
    ProvisioningIssue,
    ProvisioningResult,
    SuggestedPriority,
    SuggestedType,
    Tag,
)
from quick_capture.domain.rules import (
    AllOfCondition,
    AnyOfCondition,
    ClassificationRule,
    ComparisonOperator,
    Condition,
    DueDateKind,
    DueDateSpec,
    RuleAction,
    TextTarget,
)

__all__ = [
    "AllOfCondition",
    "AnalysisResult",
    "AnyOfCondition",
    "ClassificationRule",
    "ComparisonOperator",
    "Condition",
    "DueDateKind",
    "DueDateSpec",
    "EntityRef",
    "MarkerType",
    "ParseResult",
    "Project",
    "ProvisioningIssue",
    "ProvisioningResult",
    "RuleAction",
    "SuggestedPriority",
    "SuggestedType",
    "Tag",
    "TextTarget",
]
