from __future__ import annotations

import re
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from loguru import logger

from quick_capture.capture_parsing import normalize_names
from quick_capture.domain.models import SuggestedPriority, SuggestedType
from quick_capture.domain.rules import ClassificationRule, DueDateKind, DueDateSpec
from quick_capture.rule_conditions import EvaluationContext, evaluate_conditions
from quick_capture.text_signals import DEFAULT_SIGNALS, SignalConfig

RuleSource = Callable[[], Sequence[ClassificationRule]]

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_WEEKDAY_RE = re.compile(r"\b(?:by|next)\s+(" + "|".join(_WEEKDAYS) + r")\b")


@dataclass(frozen=True)
class RuleSet:
    """An immutable, priority-ordered snapshot of the loaded rules."""

    generation: int
    rules: tuple[ClassificationRule, ...] = ()

    @classmethod
    def build(cls, rules: Sequence[ClassificationRule], *, generation: int) -> RuleSet:
        # sorted() is stable, so equal priorities keep their load order.
        ordered = sorted(rules, key=lambda rule: -rule.priority)
        return cls(generation=generation, rules=tuple(ordered))

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, rule_id: str) -> ClassificationRule | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


@dataclass(frozen=True)
class Suggestion:
    suggested_type: SuggestedType
    suggested_reason: str
    rule_id: str
    rule_name: str
    generation: int
    matched_rule_ids: tuple[str, ...]
    suggested_tags: tuple[str, ...] = ()
    suggested_priority: SuggestedPriority | None = None
    suggested_due_date: date | None = None


@dataclass(frozen=True)
class RuleMatches:
    rule_set: RuleSet
    matched: tuple[ClassificationRule, ...]


class RuleEngine:
    """Priority-ordered first-match classifier over a hot-swappable rule snapshot."""

    def __init__(self, source: RuleSource, *, signals: SignalConfig = DEFAULT_SIGNALS) -> None:
        self._source = source
        self.signals = signals
        self._reload_lock = threading.Lock()
        self._rule_set = RuleSet(generation=0)

    @classmethod
    def from_rules(cls, rules: Sequence[ClassificationRule], *, signals: SignalConfig = DEFAULT_SIGNALS) -> RuleEngine:
        frozen = tuple(rules)
        engine = cls(lambda: frozen, signals=signals)
        engine.reload()
        return engine

    @property
    def rule_set(self) -> RuleSet:
        return self._rule_set

    def reload(self) -> RuleSet:
        """Load a fresh snapshot and swap it in; on failure the old snapshot stays."""
        with self._reload_lock:
            rules = self._source()
            rule_set = RuleSet.build(rules, generation=self._rule_set.generation + 1)
            self._rule_set = rule_set
        logger.info(f"Loaded {len(rule_set)} suggestion rules (generation {rule_set.generation})")
        return rule_set

    def find_matches(
        self,
        cleaned: str,
        raw: str,
        *,
        tags: Sequence[str] = (),
        projects: Sequence[str] = (),
        rule_set: RuleSet | None = None,
    ) -> RuleMatches:
        """Evaluate every rule of one snapshot; pass ``rule_set`` to pin a snapshot taken earlier."""
        if rule_set is None:
            rule_set = self._rule_set
        context = EvaluationContext.build(
            raw=raw,
            cleaned=cleaned,
            tags=tags,
            projects=projects,
            signals=self.signals,
        )
        matched: list[ClassificationRule] = []
        for rule in rule_set.rules:
            try:
                if evaluate_conditions(rule.conditions, context):
                    matched.append(rule)
            except Exception:
                logger.exception(f"Error evaluating rule {rule.id}; skipping it")
        return RuleMatches(rule_set=rule_set, matched=tuple(matched))

    def classify(
        self,
        cleaned: str,
        raw: str,
        *,
        tags: Sequence[str] = (),
        projects: Sequence[str] = (),
        today: date | None = None,
        rule_set: RuleSet | None = None,
    ) -> Suggestion | None:
        matches = self.find_matches(cleaned, raw, tags=tags, projects=projects, rule_set=rule_set)
        return combine_suggestion(matches, raw=raw, today=today or date.today())


def combine_suggestion(matches: RuleMatches, *, raw: str, today: date) -> Suggestion | None:
    if not matches.matched:
        return None

    primary = matches.matched[0]
    combined_tags: list[str] = []
    priority: SuggestedPriority | None = None
    due_date: date | None = None
    for rule in matches.matched:
        combined_tags.extend(rule.action.suggested_tags)
        if priority is None and rule.action.suggested_priority is not None:
            priority = rule.action.suggested_priority
        if due_date is None and rule.action.suggested_due_date is not None:
            due_date = resolve_due_date(rule.action.suggested_due_date, raw, today=today)

    return Suggestion(
        suggested_type=primary.action.suggested_type,
        suggested_reason=primary.action.suggested_reason,
        rule_id=primary.id,
        rule_name=primary.name,
        generation=matches.rule_set.generation,
        matched_rule_ids=tuple(rule.id for rule in matches.matched),
        suggested_tags=tuple(normalize_names(combined_tags)),
        suggested_priority=priority,
        suggested_due_date=due_date,
    )


def resolve_due_date(spec: DueDateSpec, raw: str, *, today: date) -> date | None:
    match spec.type:
        case DueDateKind.none:
            return None
        case DueDateKind.relative:
            return _relative_due_date(spec.value, today=today)
        case DueDateKind.extracted:
            return _extract_due_date(raw, today=today)


def _relative_due_date(value: str | None, *, today: date) -> date | None:
    if value == "today":
        return today
    if value == "tomorrow":
        return today + timedelta(days=1)
    if value == "next_week":
        return today + timedelta(days=7)
    return None


def _extract_due_date(raw: str, *, today: date) -> date | None:
    content = raw.casefold()
    if re.search(r"\btoday\b", content):
        return today
    if re.search(r"\btomorrow\b", content):
        return today + timedelta(days=1)
    match = _WEEKDAY_RE.search(content)
    if match is None:
        return None
    return next_weekday(match.group(1), today=today)


def next_weekday(day_name: str, *, today: date) -> date:
    """Next occurrence of ``day_name`` strictly after ``today``."""
    target = _WEEKDAYS.index(day_name.casefold())
    days_ahead = (target - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)
