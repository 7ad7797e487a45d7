from __future__ import annotations

from collections import Counter
from typing import Any

from pydantic import Field

from quick_capture.domain.models import DomainModel, SuggestedType
from quick_capture.rule_engine import RuleSet


class RuleStatistics(DomainModel):
    total_rules: int = 0
    task_rules: int = 0
    note_rules: int = 0
    priority_distribution: dict[str, int] = Field(default_factory=dict)
    condition_types_used: dict[str, int] = Field(default_factory=dict)
    most_common_reasons: dict[str, int] = Field(default_factory=dict)


def rule_statistics(rule_set: RuleSet) -> RuleStatistics:
    types = Counter(rule.action.suggested_type for rule in rule_set.rules)
    priorities: Counter[str] = Counter()
    conditions: Counter[str] = Counter()
    reasons: Counter[str] = Counter()
    for rule in rule_set.rules:
        priorities[str(rule.priority)] += 1
        conditions.update(rule.condition_types())
        reasons[rule.action.suggested_reason] += 1

    return RuleStatistics(
        total_rules=len(rule_set),
        task_rules=types[SuggestedType.task],
        note_rules=types[SuggestedType.note],
        priority_distribution=dict(priorities),
        condition_types_used=dict(conditions),
        most_common_reasons=dict(reasons.most_common()),
    )


def rule_listing(rule_set: RuleSet) -> dict[str, Any]:
    """Admin listing payload; the snapshot is already in priority order."""
    rules = [rule.model_dump(mode="json", exclude_none=True) for rule in rule_set.rules]
    return {
        "rules": rules,
        "total_rules": len(rules),
        "rules_by_priority": rules,
        "generation": rule_set.generation,
    }
