from __future__ import annotations

import json
from pathlib import Path

import typer

from quick_capture.capture_service import UnknownRuleError
from quick_capture.entrypoints.analyze import load_capture_service


def run_rules_list(*, rules: Path | None) -> None:
    service = load_capture_service(rules=rules)
    listed = service.list_rules()
    if not listed:
        typer.echo("No rules loaded")
        return
    for rule in listed:
        action = rule.action
        typer.echo(f"{rule.priority:>4}  {rule.id}  {action.suggested_type.value}/{action.suggested_reason}")
        typer.echo(f"      {rule.name}: {', '.join(rule.condition_types())}")


def run_rules_stats(*, rules: Path | None) -> None:
    service = load_capture_service(rules=rules)
    stats = service.rule_statistics()
    typer.echo(json.dumps(stats.model_dump(mode="json"), indent=2))


def run_rules_test(*, text: str, rule_id: str | None, rules: Path | None) -> None:
    service = load_capture_service(rules=rules)
    try:
        outcome = service.test_rule(text, rule_id)
    except UnknownRuleError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(json.dumps(outcome.model_dump(mode="json"), indent=2, ensure_ascii=False))
