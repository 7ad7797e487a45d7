from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlsplit

from quick_capture.capture_parsing import contains_name

BOOKMARK_TAG = "bookmark"

_URL_SCHEMES = frozenset({"http", "https", "ftp"})


def is_bare_url(text: str) -> bool:
    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in _URL_SCHEMES and bool(hostname)


def augment_bookmark_tag(raw_text: str, tags: Sequence[str]) -> list[str]:
    out = list(tags)
    if is_bare_url(raw_text) and not contains_name(out, BOOKMARK_TAG):
        out.append(BOOKMARK_TAG)
    return out
