from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import date

import pytest

from quick_capture.domain.models import SuggestedPriority, SuggestedType
from quick_capture.domain.rules import ClassificationRule, Condition, DueDateKind, DueDateSpec
from quick_capture.rule_conditions import EvaluationContext
from quick_capture.rule_config import RuleConfigError, parse_rule
from quick_capture.rule_engine import RuleEngine, RuleSet, next_weekday, resolve_due_date

_TODAY = date(2024, 5, 15)  # a Wednesday


def _rule(rule_id: str, priority: int, conditions: list[dict[str, object]], **action: object) -> ClassificationRule:
    return parse_rule(
        {
            "id": rule_id,
            "name": rule_id.replace("_", " "),
            "priority": priority,
            "conditions": conditions,
            "action": {"suggested_type": "task", "suggested_reason": rule_id, **action},
        },
    )


def test_higher_priority_rule_wins() -> None:
    url_rule = parse_rule(
        {
            "id": "url",
            "name": "URL",
            "priority": 10,
            "conditions": [{"type": "contains_url"}],
            "action": {"suggested_type": "note", "suggested_reason": "url_detected"},
        },
    )
    keyword_rule = parse_rule(
        {
            "id": "call",
            "name": "Call keyword",
            "priority": 5,
            "conditions": [{"type": "contains_keywords", "value": ["call"]}],
            "action": {"suggested_type": "task", "suggested_reason": "keyword_match"},
        },
    )
    engine = RuleEngine.from_rules([keyword_rule, url_rule])

    suggestion = engine.classify("call https://x.com", "call https://x.com", today=_TODAY)

    assert suggestion is not None
    assert suggestion.suggested_type == SuggestedType.note
    assert suggestion.suggested_reason == "url_detected"
    assert suggestion.rule_id == "url"
    assert suggestion.matched_rule_ids == ("url", "call")


def test_equal_priorities_keep_load_order() -> None:
    first = _rule("first", 5, [{"type": "text_length", "value": 0, "operator": "gte"}])
    second = _rule("second", 5, [{"type": "text_length", "value": 0, "operator": "gte"}])
    rule_set = RuleSet.build([first, second], generation=1)
    assert [rule.id for rule in rule_set.rules] == ["first", "second"]

    engine = RuleEngine.from_rules([first, second])
    suggestion = engine.classify("anything", "anything", today=_TODAY)
    assert suggestion is not None
    assert suggestion.rule_id == "first"


def test_no_match_returns_none() -> None:
    engine = RuleEngine.from_rules([_rule("url", 1, [{"type": "contains_url"}])])
    assert engine.classify("buy milk", "buy milk", today=_TODAY) is None


def test_matching_rules_contribute_metadata() -> None:
    engine = RuleEngine.from_rules(
        [
            _rule("primary", 10, [{"type": "has_project"}], suggested_tags=["Work"]),
            _rule(
                "urgent",
                5,
                [{"type": "contains_keywords", "value": ["urgent"]}],
                suggested_tags=["work", "urgent"],
                suggested_priority="high",
            ),
            _rule(
                "later",
                1,
                [{"type": "contains_time_reference"}],
                suggested_priority="low",
                suggested_due_date={"type": "relative", "value": "tomorrow"},
            ),
        ],
    )

    suggestion = engine.classify(
        "urgent report tomorrow",
        "+Office urgent report tomorrow",
        projects=["Office"],
        today=_TODAY,
    )

    assert suggestion is not None
    assert suggestion.rule_id == "primary"
    assert suggestion.suggested_tags == ("Work", "urgent")
    assert suggestion.suggested_priority == SuggestedPriority.high
    assert suggestion.suggested_due_date == date(2024, 5, 16)


def test_rule_that_raises_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    from quick_capture import rule_engine

    broken = _rule("broken", 10, [{"type": "contains_url"}])
    fallback = _rule("fallback", 1, [{"type": "text_length", "value": 0, "operator": "gte"}])
    engine = RuleEngine.from_rules([broken, fallback])

    real = rule_engine.evaluate_conditions

    def flaky(conditions: Sequence[Condition], context: EvaluationContext) -> bool:
        if conditions is broken.conditions:
            raise RuntimeError("boom")
        return real(conditions, context)

    monkeypatch.setattr(rule_engine, "evaluate_conditions", flaky)
    suggestion = engine.classify("https://x.com", "https://x.com", today=_TODAY)
    assert suggestion is not None
    assert suggestion.rule_id == "fallback"


def test_reload_bumps_generation_and_failed_reload_keeps_snapshot() -> None:
    state: dict[str, object] = {"rules": [_rule("a", 1, [{"type": "contains_url"}])]}

    def source() -> list[ClassificationRule]:
        rules = state["rules"]
        if isinstance(rules, Exception):
            raise rules
        assert isinstance(rules, list)
        return rules

    engine = RuleEngine(source)
    assert engine.reload().generation == 1
    state["rules"] = [_rule("b", 1, [{"type": "contains_url"}])]
    assert engine.reload().generation == 2
    assert [rule.id for rule in engine.rule_set.rules] == ["b"]

    state["rules"] = RuleConfigError("broken rules file")
    with pytest.raises(RuleConfigError):
        engine.reload()
    assert engine.rule_set.generation == 2
    assert [rule.id for rule in engine.rule_set.rules] == ["b"]


def test_concurrent_reload_never_mixes_generations() -> None:
    # Every generation holds rules whose ids carry that generation's label.
    counter = {"value": 0}

    def source() -> list[ClassificationRule]:
        counter["value"] += 1
        label = f"g{counter['value']}"
        return [
            _rule(f"{label}_hi", 10, [{"type": "text_length", "value": 0, "operator": "gte"}]),
            _rule(f"{label}_lo", 1, [{"type": "text_length", "value": 0, "operator": "gte"}]),
        ]

    engine = RuleEngine(source)
    engine.reload()
    stop = threading.Event()

    def reloader() -> None:
        while not stop.is_set():
            engine.reload()

    thread = threading.Thread(target=reloader)
    thread.start()
    try:
        for _ in range(500):
            suggestion = engine.classify("text", "text", today=_TODAY)
            assert suggestion is not None
            labels = {rule_id.split("_")[0] for rule_id in suggestion.matched_rule_ids}
            assert labels == {f"g{suggestion.generation}"}
    finally:
        stop.set()
        thread.join()


def test_resolve_due_dates() -> None:
    assert resolve_due_date(DueDateSpec(type=DueDateKind.none), "", today=_TODAY) is None
    assert resolve_due_date(DueDateSpec(type=DueDateKind.relative, value="today"), "", today=_TODAY) == _TODAY
    assert resolve_due_date(DueDateSpec(type=DueDateKind.relative, value="next_week"), "", today=_TODAY) == date(
        2024,
        5,
        22,
    )
    assert resolve_due_date(DueDateSpec(type=DueDateKind.relative, value="someday"), "", today=_TODAY) is None

    extracted = DueDateSpec(type=DueDateKind.extracted)
    assert resolve_due_date(extracted, "call mom Tomorrow", today=_TODAY) == date(2024, 5, 16)
    assert resolve_due_date(extracted, "send report by Friday", today=_TODAY) == date(2024, 5, 17)
    assert resolve_due_date(extracted, "no date here", today=_TODAY) is None


def test_next_weekday_is_strictly_after_today() -> None:
    assert next_weekday("wednesday", today=_TODAY) == date(2024, 5, 22)
    assert next_weekday("Monday", today=_TODAY) == date(2024, 5, 20)
