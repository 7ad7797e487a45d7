from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import assert_never

from quick_capture.bookmarks import is_bare_url
from quick_capture.capture_parsing import contains_name
from quick_capture.domain.rules import (
    AllOfCondition,
    AnyOfCondition,
    ComparisonOperator,
    Condition,
    ContainsCodeCondition,
    ContainsKeywordsCondition,
    ContainsTimeReferenceCondition,
    ContainsUrlCondition,
    HasProjectCondition,
    HasTagCondition,
    IsBareUrlCondition,
    IsLongTextCondition,
    IsQuestionCondition,
    MatchesRegexCondition,
    ProjectNameMatchesCondition,
    StartsWithVerbCondition,
    TagCountCondition,
    TextLengthCondition,
    TextTarget,
)
from quick_capture.text_signals import (
    DEFAULT_SIGNALS,
    SignalConfig,
    contains_code,
    contains_keywords,
    contains_time_reference,
    contains_url,
    is_long_text,
    is_question,
    starts_with_verb,
    word_count,
)


@dataclass(frozen=True)
class EvaluationContext:
    raw: str
    cleaned: str
    tags: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
    signals: SignalConfig = DEFAULT_SIGNALS

    @classmethod
    def build(
        cls,
        *,
        raw: str,
        cleaned: str,
        tags: Sequence[str] = (),
        projects: Sequence[str] = (),
        signals: SignalConfig = DEFAULT_SIGNALS,
    ) -> EvaluationContext:
        return cls(raw=raw, cleaned=cleaned, tags=tuple(tags), projects=tuple(projects), signals=signals)


def compare_numbers(actual: int, expected: int, operator: ComparisonOperator) -> bool:
    match operator:
        case ComparisonOperator.gt:
            return actual > expected
        case ComparisonOperator.gte:
            return actual >= expected
        case ComparisonOperator.lt:
            return actual < expected
        case ComparisonOperator.lte:
            return actual <= expected
        case ComparisonOperator.eq:
            return actual == expected


def evaluate_conditions(conditions: Sequence[Condition], context: EvaluationContext) -> bool:
    return all(evaluate_condition(condition, context) for condition in conditions)


def evaluate_condition(condition: Condition, context: EvaluationContext) -> bool:
    match condition:
        case HasProjectCondition(value=wanted):
            return bool(context.projects) == wanted
        case HasTagCondition(value=name):
            return contains_name(context.tags, name)
        case ProjectNameMatchesCondition(value=name):
            return contains_name(context.projects, name)
        case TagCountCondition(value=expected, operator=operator):
            return compare_numbers(len(context.tags), expected, operator)
        case StartsWithVerbCondition(value=wanted):
            return starts_with_verb(context.cleaned, config=context.signals) == wanted
        case TextLengthCondition(value=expected, operator=operator):
            return compare_numbers(word_count(context.cleaned), expected, operator)
        case ContainsUrlCondition(value=wanted):
            return contains_url(context.raw) == wanted
        case IsBareUrlCondition(value=wanted):
            return is_bare_url(context.raw) == wanted
        case ContainsKeywordsCondition(value=keywords):
            return contains_keywords(context.raw, keywords)
        case ContainsTimeReferenceCondition(value=wanted):
            return contains_time_reference(context.raw) == wanted
        case IsQuestionCondition(value=wanted):
            return is_question(context.raw) == wanted
        case IsLongTextCondition(value=wanted):
            return is_long_text(context.raw, config=context.signals) == wanted
        case ContainsCodeCondition(value=wanted):
            return contains_code(context.raw) == wanted
        case MatchesRegexCondition():
            return _matches_regex(condition, context)
        case AnyOfCondition(conditions=nested):
            return any(evaluate_condition(item, context) for item in nested)
        case AllOfCondition(conditions=nested):
            return evaluate_conditions(nested, context)
        case _:
            assert_never(condition)


def _matches_regex(condition: MatchesRegexCondition, context: EvaluationContext) -> bool:
    if not condition.pattern:
        return False
    flags = re.IGNORECASE if condition.ignore_case else 0
    try:
        compiled = re.compile(condition.pattern, flags)
    except re.error:
        return False
    text = context.cleaned if condition.target == TextTarget.cleaned else context.raw
    return compiled.search(text) is not None
