from __future__ import annotations

from datetime import date

import pytest

from quick_capture.analysis import analyze_capture, baseline_suggestion
from quick_capture.domain.models import SuggestedPriority, SuggestedType
from quick_capture.rule_config import DEFAULT_RULES_PATH, load_rules
from quick_capture.rule_engine import RuleEngine, RuleSet

_TODAY = date(2024, 5, 15)


@pytest.fixture()
def engine() -> RuleEngine:
    return RuleEngine.from_rules(load_rules(DEFAULT_RULES_PATH))


def test_verb_with_project_becomes_task(engine: RuleEngine) -> None:
    result = analyze_capture("#work +Health walk the dog", engine=engine, today=_TODAY)
    assert result.parsed_tags == ["work"]
    assert result.parsed_projects == ["Health"]
    assert result.cleaned_content == "walk the dog"
    assert result.suggested_type == SuggestedType.task
    assert result.suggested_reason == "verb_detected"
    assert result.rule_id == "verb_with_project_task"


def test_bare_url_gets_bookmark_tag_and_note(engine: RuleEngine) -> None:
    result = analyze_capture("https://example.com", engine=engine, today=_TODAY)
    assert result.parsed_tags == ["bookmark"]
    assert result.suggested_type == SuggestedType.note
    assert result.suggested_reason == "bookmark_tag"


def test_url_in_text_is_a_note(engine: RuleEngine) -> None:
    result = analyze_capture("call https://x.com", engine=engine, today=_TODAY)
    assert result.parsed_tags == []
    assert result.suggested_type == SuggestedType.note
    assert result.suggested_reason == "url_detected"


def test_time_reference_sets_due_date(engine: RuleEngine) -> None:
    result = analyze_capture("call the dentist tomorrow", engine=engine, today=_TODAY)
    assert result.suggested_type == SuggestedType.task
    assert result.rule_id == "specific_time_today_tomorrow"
    assert result.suggested_due_date == date(2024, 5, 16)


def test_priority_keyword_sets_priority(engine: RuleEngine) -> None:
    result = analyze_capture("urgent: renew passport", engine=engine, today=_TODAY)
    assert result.suggested_reason == "priority_keyword"
    assert result.suggested_priority == SuggestedPriority.high


def test_no_suggestion(engine: RuleEngine) -> None:
    result = analyze_capture("buy milk", engine=engine, today=_TODAY)
    assert result.suggested_type is None
    assert result.suggested_reason is None
    assert result.rule_id is None
    assert result.suggested_tags == []


def test_empty_rule_set_falls_back_to_baseline() -> None:
    engine = RuleEngine.from_rules([])
    task = analyze_capture("+Health walk the dog", engine=engine)
    assert (task.suggested_type, task.suggested_reason) == (SuggestedType.task, "verb_detected")
    assert task.rule_id is None

    no_project = analyze_capture("walk the dog", engine=engine)
    assert no_project.suggested_type is None


def test_pinned_rule_set_is_used_instead_of_current(engine: RuleEngine) -> None:
    pinned = analyze_capture("+Health walk the dog", engine=engine, rule_set=RuleSet(generation=0), today=_TODAY)
    assert (pinned.suggested_type, pinned.suggested_reason) == (SuggestedType.task, "verb_detected")
    assert pinned.rule_id is None

    current = analyze_capture("+Health walk the dog", engine=engine, today=_TODAY)
    assert current.rule_id == "verb_with_project_task"


def test_baseline_suggestion_order() -> None:
    assert baseline_suggestion("read", "#bookmark read", tags=["bookmark"], projects=["P"]) == (
        SuggestedType.note,
        "bookmark_tag",
    )
    assert baseline_suggestion("see https://x.com", "see https://x.com +P", tags=[], projects=["P"]) == (
        SuggestedType.note,
        "url_detected",
    )
    assert baseline_suggestion("fix sink", "fix sink +P", tags=[], projects=["P"]) == (
        SuggestedType.task,
        "verb_detected",
    )
    assert baseline_suggestion("sink broken", "sink broken +P", tags=[], projects=["P"]) is None
    assert baseline_suggestion("fix sink", "fix sink", tags=[], projects=[]) is None


def test_analysis_is_side_effect_free(engine: RuleEngine) -> None:
    first = analyze_capture("walk the dog #work +Health", engine=engine, today=_TODAY)
    second = analyze_capture("walk the dog #work +Health", engine=engine, today=_TODAY)
    assert first == second
    assert engine.rule_set.generation == 1
