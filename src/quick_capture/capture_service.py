from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from quick_capture.analysis import analyze_capture
from quick_capture.analysis_sequencer import DEFAULT_DEBOUNCE_SECONDS, DebouncedAnalyzer
from quick_capture.bookmarks import augment_bookmark_tag
from quick_capture.capture_config import CaptureSettings
from quick_capture.capture_parsing import parse_capture
from quick_capture.domain.models import AnalysisResult, DomainModel
from quick_capture.domain.rules import ClassificationRule
from quick_capture.rule_config import load_rules
from quick_capture.rule_engine import RuleEngine, RuleSet
from quick_capture.rule_stats import RuleStatistics, rule_listing, rule_statistics


class UnknownRuleError(LookupError):
    pass


class RuleTestResult(DomainModel):
    input: str
    result: AnalysisResult
    rule_id: str | None = None
    rule_matched: bool = False
    matched_rule_ids: list[str]
    generation: int


class CaptureService:
    """Analyze and rule-administration operations shared by the CLI and the web app."""

    def __init__(self, engine: RuleEngine, *, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self.engine = engine
        self.debounce_seconds = debounce_seconds

    @classmethod
    def from_settings(cls, settings: CaptureSettings) -> CaptureService:
        rules_path = settings.rules_path
        engine = RuleEngine(lambda: load_rules(rules_path), signals=settings.signals)
        engine.reload()
        return cls(engine, debounce_seconds=settings.debounce_seconds)

    def analyze(self, content: str, *, today: date | None = None) -> AnalysisResult:
        return analyze_capture(content, engine=self.engine, today=today)

    def debounced_analyzer(
        self,
        on_result: Callable[[AnalysisResult | None], None] | None = None,
    ) -> DebouncedAnalyzer:
        return DebouncedAnalyzer(self.analyze, delay_seconds=self.debounce_seconds, on_result=on_result)

    def list_rules(self) -> list[ClassificationRule]:
        return list(self.engine.rule_set.rules)

    def rule_listing(self) -> dict[str, Any]:
        return rule_listing(self.engine.rule_set)

    def rule_statistics(self) -> RuleStatistics:
        return rule_statistics(self.engine.rule_set)

    def reload_rules(self) -> RuleSet:
        return self.engine.reload()

    def test_rule(self, text: str, rule_id: str | None = None, *, today: date | None = None) -> RuleTestResult:
        rule_set = self.engine.rule_set
        if rule_id is not None and rule_set.get(rule_id) is None:
            raise UnknownRuleError(f"Unknown rule id: {rule_id}")

        result = analyze_capture(text, engine=self.engine, today=today, rule_set=rule_set)
        parsed = parse_capture(text)
        matches = self.engine.find_matches(
            parsed.cleaned_content,
            text,
            tags=augment_bookmark_tag(text, parsed.tags),
            projects=parsed.projects,
            rule_set=rule_set,
        )
        matched_ids = [rule.id for rule in matches.matched]
        return RuleTestResult(
            input=text,
            result=result,
            rule_id=rule_id,
            rule_matched=rule_id is not None and rule_id in matched_ids,
            matched_rule_ids=matched_ids,
            generation=rule_set.generation,
        )
