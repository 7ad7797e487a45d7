from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from quick_capture.domain.rules import ClassificationRule

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "default_rules.yaml"

_RULE_SUFFIXES = (".yaml", ".yml")


class RuleConfigError(RuntimeError):
    pass


def load_rules(path: Path) -> list[ClassificationRule]:
    """Load rules from one YAML file or every YAML file of a directory (sorted by name)."""
    if path.is_dir():
        files = sorted(item for item in path.iterdir() if item.is_file() and item.suffix in _RULE_SUFFIXES)
    elif path.exists():
        files = [path]
    else:
        raise RuleConfigError(f"Rules path does not exist: {path}")

    rules: list[ClassificationRule] = []
    seen: dict[str, Path] = {}
    for rule_file in files:
        for rule in _load_rule_file(rule_file):
            if rule.id in seen:
                raise RuleConfigError(f"Duplicate rule id {rule.id!r} in {rule_file} (first defined in {seen[rule.id]})")
            seen[rule.id] = rule_file
            rules.append(rule)

    if not rules:
        logger.warning(f"No suggestion rules found under {path}")
    return rules


def parse_rule(raw: Mapping[str, Any], *, source: Path | str = "<inline>") -> ClassificationRule:
    data = dict(raw)
    rule_id = data.get("id", "<missing id>")
    if "conditions" in data:
        data["conditions"] = normalize_conditions(data["conditions"], source=source, rule_id=str(rule_id))
    try:
        return ClassificationRule.model_validate(data)
    except ValidationError as exc:
        raise RuleConfigError(f"Invalid rule {rule_id!r} in {source}: {exc}") from exc


def normalize_conditions(value: object, *, source: Path | str, rule_id: str) -> list[dict[str, Any]]:
    """Accept a list (AND), ``{and: [...]}``, ``{or: [...]}`` or a single condition mapping."""
    if isinstance(value, list):
        return [_normalize_condition(item, source=source, rule_id=rule_id) for item in value]
    if isinstance(value, Mapping):
        if "and" in value:
            return normalize_conditions(value["and"], source=source, rule_id=rule_id)
        if "or" in value:
            nested = normalize_conditions(value["or"], source=source, rule_id=rule_id)
            return [{"type": "any_of", "conditions": nested}]
        return [_normalize_condition(value, source=source, rule_id=rule_id)]
    raise RuleConfigError(f"Expected list or mapping for conditions of rule {rule_id!r} in {source}")


def _normalize_condition(value: object, *, source: Path | str, rule_id: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise RuleConfigError(f"Expected mapping for a condition of rule {rule_id!r} in {source}")
    if "and" in value:
        return {"type": "all_of", "conditions": normalize_conditions(value["and"], source=source, rule_id=rule_id)}
    if "or" in value:
        return {"type": "any_of", "conditions": normalize_conditions(value["or"], source=source, rule_id=rule_id)}
    condition = dict(value)
    if condition.get("type") in ("any_of", "all_of") and "conditions" in condition:
        condition["conditions"] = normalize_conditions(condition["conditions"], source=source, rule_id=rule_id)
    return condition


def _load_rule_file(path: Path) -> list[ClassificationRule]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RuleConfigError(f"Invalid YAML at {path}: {exc}") from exc
    except OSError as exc:
        raise RuleConfigError(f"Failed to read {path}: {exc}") from exc

    if loaded is None:
        return []
    if isinstance(loaded, Mapping):
        loaded = loaded.get("rules", [])
    if not isinstance(loaded, list):
        raise RuleConfigError(f"Expected a list of rules at {path}")

    rules: list[ClassificationRule] = []
    for item in loaded:
        if not isinstance(item, Mapping):
            raise RuleConfigError(f"Expected mapping for each rule in {path}")
        rules.append(parse_rule(item, source=path))
    return rules
