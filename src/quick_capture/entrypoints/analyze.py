from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import typer

from quick_capture.capture_config import CaptureConfigError, load_capture_settings
from quick_capture.capture_editing import describe_suggestion
from quick_capture.capture_service import CaptureService
from quick_capture.domain.models import AnalysisResult
from quick_capture.markers import format_project_ref, format_tag_ref
from quick_capture.rule_config import RuleConfigError


def load_capture_service(*, rules: Path | None = None) -> CaptureService:
    try:
        settings = load_capture_settings()
        if rules is not None:
            settings = dataclasses.replace(settings, rules_path=rules)
        return CaptureService.from_settings(settings)
    except (CaptureConfigError, RuleConfigError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


def run_analyze(*, text: str, rules: Path | None, as_json: bool) -> None:
    service = load_capture_service(rules=rules)
    result = service.analyze(text)
    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return
    typer.echo("\n".join(_render_result(result)))


def _render_result(result: AnalysisResult) -> list[str]:
    lines = [
        f"Content: {result.cleaned_content or '(empty)'}",
        f"Tags: {' '.join(map(format_tag_ref, result.parsed_tags)) or 'none'}",
        f"Projects: {' '.join(map(format_project_ref, result.parsed_projects)) or 'none'}",
    ]
    if result.suggested_type is None:
        lines.append("Suggestion: none")
        return lines

    suggestion = f"Suggestion: {result.suggested_type.value} ({result.suggested_reason})"
    if result.rule_id:
        suggestion += f" rule={result.rule_id}"
    lines.append(suggestion)
    if result.suggested_tags:
        lines.append(f"Suggested tags: {', '.join(result.suggested_tags)}")
    if result.suggested_priority is not None:
        lines.append(f"Priority: {result.suggested_priority.value}")
    if result.suggested_due_date is not None:
        lines.append(f"Due: {result.suggested_due_date.isoformat()}")
    hint = describe_suggestion(result)
    if hint:
        lines.append(hint)
    return lines
