from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_URL_RE = re.compile(r"https?://[^\s]+", re.IGNORECASE)
_WORD_STRIP = "\"'.,;:!?()[]{}<>"

_TIME_KEYWORDS: tuple[str, ...] = (
    "tomorrow",
    "today",
    "tonight",
    "yesterday",
    "deadline",
    "due",
    "schedule",
    "appointment",
    "by",
    "before",
    "after",
    "next week",
    "this week",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
_TIME_RE = re.compile(r"\b(?:" + "|".join(re.escape(word) for word in _TIME_KEYWORDS) + r")\b", re.IGNORECASE)

_QUESTION_WORDS = frozenset(
    {
        "what",
        "when",
        "where",
        "who",
        "why",
        "how",
        "which",
        "can",
        "could",
        "would",
        "should",
        "will",
        "do",
        "does",
        "did",
        "is",
        "are",
        "was",
        "were",
    },
)

_AUXILIARY_VERBS = frozenset(
    {
        "be",
        "is",
        "am",
        "are",
        "was",
        "were",
        "being",
        "been",
        "have",
        "has",
        "had",
        "having",
        "does",
        "did",
        "doing",
        "will",
        "would",
        "shall",
        "should",
        "may",
        "might",
        "can",
        "could",
        "must",
        "ought",
    },
)

# Imperative verbs that usually open an actionable capture ("call mom", "fix the sink").
ACTION_VERBS = frozenset(
    {
        "add",
        "answer",
        "apply",
        "archive",
        "arrange",
        "ask",
        "assign",
        "book",
        "bring",
        "build",
        "buy",
        "call",
        "cancel",
        "change",
        "check",
        "clean",
        "clear",
        "close",
        "collect",
        "confirm",
        "contact",
        "cook",
        "create",
        "deliver",
        "deploy",
        "design",
        "do",
        "download",
        "draft",
        "drop",
        "edit",
        "email",
        "finish",
        "fix",
        "follow",
        "get",
        "give",
        "go",
        "install",
        "invite",
        "learn",
        "make",
        "meet",
        "merge",
        "move",
        "order",
        "organize",
        "pack",
        "pay",
        "pick",
        "plan",
        "post",
        "prepare",
        "print",
        "publish",
        "read",
        "refactor",
        "release",
        "remind",
        "remove",
        "renew",
        "repair",
        "reply",
        "research",
        "reserve",
        "return",
        "review",
        "run",
        "schedule",
        "sell",
        "send",
        "set",
        "setup",
        "share",
        "ship",
        "sign",
        "sort",
        "start",
        "study",
        "submit",
        "take",
        "test",
        "text",
        "update",
        "upgrade",
        "upload",
        "visit",
        "walk",
        "wash",
        "watch",
        "water",
        "write",
    },
)

_CODE_RE = re.compile(
    r"```"
    r"|`[^`\n]+`"
    r"|^\s*(?:def|class|import|from|function|const|let|var|public|private|return|SELECT|INSERT|UPDATE)\b"
    r"|=>|;\s*$|\{\s*$|^\s*\}"
    r"|\b\w+\([^()\n]*\)\s*[;{:]",
    re.MULTILINE,
)


@dataclass(frozen=True)
class SignalConfig:
    long_text_words: int = 40
    long_text_lines: int = 3
    extra_action_verbs: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if self.long_text_words < 1:
            raise ValueError("long_text_words must be >= 1")
        if self.long_text_lines < 2:
            raise ValueError("long_text_lines must be >= 2")

    @property
    def action_verbs(self) -> frozenset[str]:
        return ACTION_VERBS | {verb.casefold() for verb in self.extra_action_verbs}


DEFAULT_SIGNALS = SignalConfig()


def word_count(text: str) -> int:
    return len(text.split())


def first_word(text: str) -> str | None:
    words = text.split()
    if not words:
        return None
    word = words[0].strip(_WORD_STRIP).casefold()
    return word or None


def is_action_verb(word: str, *, config: SignalConfig = DEFAULT_SIGNALS) -> bool:
    normalized = word.strip(_WORD_STRIP).casefold()
    if not normalized or normalized in _AUXILIARY_VERBS:
        return False
    return normalized in config.action_verbs


def starts_with_verb(text: str, *, config: SignalConfig = DEFAULT_SIGNALS) -> bool:
    word = first_word(text)
    return word is not None and is_action_verb(word, config=config)


def contains_url(text: str) -> bool:
    return _URL_RE.search(text) is not None


def contains_keywords(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.casefold()
    return any(keyword.strip() and keyword.casefold() in lowered for keyword in keywords)


def contains_time_reference(text: str) -> bool:
    return _TIME_RE.search(text) is not None


def is_question(text: str) -> bool:
    stripped = text.strip()
    if not stripped:
        return False
    if stripped.endswith("?"):
        return True
    word = first_word(stripped)
    return word in _QUESTION_WORDS and len(stripped.split()) > 1


def is_long_text(text: str, *, config: SignalConfig = DEFAULT_SIGNALS) -> bool:
    if word_count(text) >= config.long_text_words:
        return True
    lines = [line for line in text.splitlines() if line.strip()]
    return len(lines) >= config.long_text_lines


def contains_code(text: str) -> bool:
    return _CODE_RE.search(text) is not None
