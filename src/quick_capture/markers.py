from __future__ import annotations

import re
from dataclasses import dataclass

from quick_capture.tokenizer import Token

TAG_SIGIL = "#"
PROJECT_SIGIL = "+"

_TAG_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")


@dataclass(frozen=True)
class TagMarker:
    name: str


@dataclass(frozen=True)
class ProjectMarker:
    name: str


@dataclass(frozen=True)
class Plain:
    pass


PLAIN = Plain()

MarkerKind = TagMarker | ProjectMarker | Plain


def classify_token(token: Token) -> MarkerKind:
    text = token.text
    if text.startswith(TAG_SIGIL):
        name = text[1:]
        if is_valid_tag_name(name):
            return TagMarker(name=name)
        return PLAIN
    if text.startswith(PROJECT_SIGIL):
        name = _strip_quote_pair(text[1:])
        if name.strip().strip('"'):
            return ProjectMarker(name=name)
        return PLAIN
    return PLAIN


def is_marker(token: Token) -> bool:
    return not isinstance(classify_token(token), Plain)


def is_marker_shaped(word: str) -> bool:
    """True for any word carrying a tag or project sigil, valid or not."""
    return word.startswith((TAG_SIGIL, PROJECT_SIGIL))


def is_valid_tag_name(name: str) -> bool:
    return _TAG_NAME_RE.fullmatch(name) is not None


def format_tag_ref(name: str) -> str:
    return f"{TAG_SIGIL}{name}"


def format_project_ref(name: str) -> str:
    if any(ch.isspace() for ch in name):
        return f'{PROJECT_SIGIL}"{name}"'
    return f"{PROJECT_SIGIL}{name}"


def _strip_quote_pair(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value
