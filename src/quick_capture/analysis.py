from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from quick_capture.bookmarks import BOOKMARK_TAG, augment_bookmark_tag
from quick_capture.capture_parsing import contains_name, parse_capture
from quick_capture.domain.models import AnalysisResult, SuggestedType
from quick_capture.rule_engine import RuleEngine, RuleSet
from quick_capture.text_signals import DEFAULT_SIGNALS, SignalConfig, contains_url, starts_with_verb


def analyze_capture(
    text: str,
    *,
    engine: RuleEngine,
    today: date | None = None,
    rule_set: RuleSet | None = None,
) -> AnalysisResult:
    """Parse one captured line and attach the suggestion of a single rule snapshot."""
    if rule_set is None:
        rule_set = engine.rule_set
    parsed = parse_capture(text)
    tags = augment_bookmark_tag(text, parsed.tags)
    result = AnalysisResult(
        parsed_tags=tags,
        parsed_projects=parsed.projects,
        cleaned_content=parsed.cleaned_content,
    )

    if len(rule_set) == 0:
        baseline = baseline_suggestion(
            parsed.cleaned_content,
            text,
            tags=tags,
            projects=parsed.projects,
            signals=engine.signals,
        )
        if baseline is None:
            return result
        suggested_type, reason = baseline
        return result.model_copy(update={"suggested_type": suggested_type, "suggested_reason": reason})

    suggestion = engine.classify(
        parsed.cleaned_content,
        text,
        tags=tags,
        projects=parsed.projects,
        today=today,
        rule_set=rule_set,
    )
    if suggestion is None:
        return result
    return result.model_copy(
        update={
            "suggested_type": suggestion.suggested_type,
            "suggested_reason": suggestion.suggested_reason,
            "rule_id": suggestion.rule_id,
            "rule_name": suggestion.rule_name,
            "suggested_tags": list(suggestion.suggested_tags),
            "suggested_priority": suggestion.suggested_priority,
            "suggested_due_date": suggestion.suggested_due_date,
        },
    )


def baseline_suggestion(
    cleaned: str,
    raw: str,
    *,
    tags: Sequence[str],
    projects: Sequence[str],
    signals: SignalConfig = DEFAULT_SIGNALS,
) -> tuple[SuggestedType, str] | None:
    """Built-in suggestion used when no rules are loaded; it needs a project."""
    if not projects:
        return None
    if contains_name(tags, BOOKMARK_TAG):
        return SuggestedType.note, "bookmark_tag"
    if contains_url(raw):
        return SuggestedType.note, "url_detected"
    if starts_with_verb(cleaned, config=signals):
        return SuggestedType.task, "verb_detected"
    return None
