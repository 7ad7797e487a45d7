from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from quick_capture.analysis_sequencer import DEFAULT_DEBOUNCE_SECONDS
from quick_capture.rule_config import DEFAULT_RULES_PATH
from quick_capture.text_signals import SignalConfig

_KNOWN_KEYS = frozenset({"rules_path", "debounce_seconds", "long_text_words", "long_text_lines", "extra_action_verbs"})


class CaptureConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class CaptureSettings:
    rules_path: Path = DEFAULT_RULES_PATH
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    long_text_words: int = 40
    long_text_lines: int = 3
    extra_action_verbs: tuple[str, ...] = ()
    source: str | None = None

    def __post_init__(self) -> None:
        where = self.source or "settings"
        if self.debounce_seconds < 0:
            raise CaptureConfigError(f"debounce_seconds must be >= 0 in {where}")
        if self.long_text_words < 1:
            raise CaptureConfigError(f"long_text_words must be >= 1 in {where}")
        if self.long_text_lines < 2:
            raise CaptureConfigError(f"long_text_lines must be >= 2 in {where}")

    @property
    def signals(self) -> SignalConfig:
        return SignalConfig(
            long_text_words=self.long_text_words,
            long_text_lines=self.long_text_lines,
            extra_action_verbs=frozenset(self.extra_action_verbs),
        )


def global_config_path() -> Path:
    override = os.environ.get("QUICK_CAPTURE_CONFIG")
    if override:
        return Path(override).expanduser()
    root = os.environ.get("XDG_CONFIG_HOME")
    if root:
        base = Path(root)
    else:
        base = Path.home() / ".config"
    return base / "quick-capture" / "config.yaml"


def load_capture_settings(path: Path | None = None) -> CaptureSettings:
    config_path = path if path is not None else global_config_path()
    data = _load_yaml_mapping(config_path)
    if not data:
        return CaptureSettings()
    return _parse_settings(data, source=config_path)


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise CaptureConfigError(f"Invalid YAML at {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise CaptureConfigError(f"Expected mapping YAML at {path}")
    return dict(loaded)


def _parse_settings(data: Mapping[str, Any], *, source: Path) -> CaptureSettings:
    unknown = sorted(str(key) for key in data if key not in _KNOWN_KEYS)
    if unknown:
        raise CaptureConfigError(f"Unknown config keys in {source}: {', '.join(unknown)}")

    rules_path = DEFAULT_RULES_PATH
    raw_rules = data.get("rules_path")
    if raw_rules is not None:
        if not isinstance(raw_rules, str) or not raw_rules.strip():
            raise CaptureConfigError(f"Expected non-empty string for rules_path in {source}")
        rules_path = Path(raw_rules).expanduser()
        if not rules_path.is_absolute():
            rules_path = source.parent / rules_path

    return CaptureSettings(
        rules_path=rules_path,
        debounce_seconds=_optional_number(data, "debounce_seconds", DEFAULT_DEBOUNCE_SECONDS, source),
        long_text_words=_optional_int(data, "long_text_words", 40, source),
        long_text_lines=_optional_int(data, "long_text_lines", 3, source),
        extra_action_verbs=_optional_str_list(data, "extra_action_verbs", source),
        source=str(source),
    )


def _optional_number(data: Mapping[str, Any], key: str, default: float, source: Path) -> float:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise CaptureConfigError(f"Expected number for {key} in {source}")
    return float(value)


def _optional_int(data: Mapping[str, Any], key: str, default: int, source: Path) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise CaptureConfigError(f"Expected int for {key} in {source}")
    return value


def _optional_str_list(data: Mapping[str, Any], key: str, source: Path) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise CaptureConfigError(f"Expected list of strings for {key} in {source}")
    return tuple(item.strip() for item in value if item.strip())
