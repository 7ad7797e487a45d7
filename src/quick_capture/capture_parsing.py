from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from quick_capture.clusters import Cluster, clustered_indexes, find_valid_clusters
from quick_capture.domain.models import ParseResult
from quick_capture.markers import ProjectMarker, TagMarker, classify_token
from quick_capture.tokenizer import Token, join_tokens, tokenize


@dataclass(frozen=True)
class Extraction:
    tags: list[str]
    projects: list[str]
    cleaned: str


def parse_capture(text: str) -> ParseResult:
    tokens = tokenize(text.strip())
    extraction = extract(tokens, find_valid_clusters(tokens))
    return ParseResult(
        tags=extraction.tags,
        projects=extraction.projects,
        cleaned_content=extraction.cleaned,
        raw_content=text,
    )


def extract(tokens: Sequence[Token], clusters: Sequence[Cluster]) -> Extraction:
    metadata_indexes = clustered_indexes([cluster for cluster in clusters if cluster.valid])

    tags: list[str] = []
    projects: list[str] = []
    kept: list[Token] = []
    for idx, token in enumerate(tokens):
        if idx not in metadata_indexes:
            kept.append(token)
            continue
        kind = classify_token(token)
        if isinstance(kind, TagMarker):
            tags.append(kind.name)
        elif isinstance(kind, ProjectMarker):
            projects.append(kind.name)

    return Extraction(
        tags=normalize_names(tags),
        projects=normalize_names(projects),
        cleaned=join_tokens(kept),
    )


def normalize_names(items: Iterable[str]) -> list[str]:
    """Trimmed, non-empty names deduplicated by casefold; the first spelling wins."""
    by_key: dict[str, str] = {}
    for name in map(str.strip, items):
        if name:
            by_key.setdefault(name.casefold(), name)
    return list(by_key.values())


def contains_name(names: Iterable[str], name: str) -> bool:
    key = name.casefold()
    return any(candidate.casefold() == key for candidate in names)
