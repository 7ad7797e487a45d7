from __future__ import annotations

import re
from dataclasses import dataclass

from quick_capture.domain.models import AnalysisResult, MarkerType, SuggestedType
from quick_capture.markers import PROJECT_SIGIL, TAG_SIGIL, is_marker_shaped

_TAG_QUERY_RE = re.compile(r"(?:^|(?<=\s))#([A-Za-z0-9_-]*)$")
_PROJECT_QUERY_RE = re.compile(r"(?:^|(?<=\s))\+(?:\"([^\"]*)\"?|([A-Za-z0-9_-]*))$")


@dataclass(frozen=True)
class MarkerQuery:
    kind: MarkerType
    query: str
    start: int
    end: int


def marker_query_at_cursor(text: str, position: int) -> MarkerQuery | None:
    """Return the partial ``#tag``/``+project`` being typed at ``position``, if autocomplete applies."""
    position = max(0, min(position, len(text)))
    before = text[:position]

    match = _TAG_QUERY_RE.search(before)
    kind = MarkerType.tag
    if match is None:
        match = _PROJECT_QUERY_RE.search(before)
        kind = MarkerType.project
    if match is None:
        return None

    query = next((group for group in match.groups() if group is not None), "")
    start = match.start()
    if not _query_allowed(text[:start], text[position:]):
        return None
    return MarkerQuery(kind=kind, query=query, start=start, end=position)


def _query_allowed(text_before: str, text_after: str) -> bool:
    if not text_after.strip():
        return True
    words = text_before.split()
    return all(is_marker_shaped(word) for word in words)


def remove_marker(text: str, kind: MarkerType, name: str) -> str:
    """Remove every standalone occurrence of the marker for ``name`` (case-insensitive)."""
    escaped = re.escape(name)
    if kind == MarkerType.tag:
        patterns = [rf"(^|\s){re.escape(TAG_SIGIL)}{escaped}(?=$|\s)"]
    else:
        sigil = re.escape(PROJECT_SIGIL)
        patterns = [rf"(^|\s){sigil}\"{escaped}\"(?=$|\s)", rf"(^|\s){sigil}{escaped}(?=$|\s)"]

    updated = text
    for pattern in patterns:
        updated = re.sub(pattern, r"\1", updated, flags=re.IGNORECASE)
    return _clean_spacing(updated)


def _clean_spacing(text: str) -> str:
    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    return text.strip()


def describe_suggestion(result: AnalysisResult | None) -> str | None:
    if result is None or result.suggested_type is None:
        return None

    project = result.parsed_projects[0] if result.parsed_projects else None
    match result.suggested_type:
        case SuggestedType.note:
            label = "a bookmark note" if result.suggested_reason == "url_detected" else "a note"
            suffix = f" for {project}" if project else ""
            return f"Will be saved as {label}{suffix}."
        case SuggestedType.task:
            suffix = f" under {project}" if project else ""
            return f"Will be created as a task{suffix}."
