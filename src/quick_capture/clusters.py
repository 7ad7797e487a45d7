from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from quick_capture.markers import is_marker, is_marker_shaped
from quick_capture.tokenizer import Token


@dataclass(frozen=True)
class Cluster:
    """A maximal run of marker tokens, ``start``/``end`` inclusive."""

    start: int
    end: int
    touches_start: bool
    touches_end: bool
    valid: bool


def find_marker_runs(tokens: Sequence[Token]) -> list[tuple[int, int]]:
    runs: list[tuple[int, int]] = []
    idx = 0
    total = len(tokens)
    while idx < total:
        if not is_marker(tokens[idx]):
            idx += 1
            continue
        run_end = idx
        while run_end + 1 < total and is_marker(tokens[run_end + 1]):
            run_end += 1
        runs.append((idx, run_end))
        idx = run_end + 1
    return runs


def find_clusters(tokens: Sequence[Token]) -> list[Cluster]:
    """Every marker run, each flagged with whether it is anchored to an edge."""
    if not tokens:
        return []

    last = len(tokens) - 1
    shaped = [is_marker_shaped(token.text) for token in tokens]

    clusters: list[Cluster] = []
    for start, end in find_marker_runs(tokens):
        touches_start = start == 0
        touches_end = end == last
        anchored_start = touches_start or all(shaped[:start])
        anchored_end = touches_end or all(shaped[end + 1 :])
        clusters.append(
            Cluster(
                start=start,
                end=end,
                touches_start=touches_start,
                touches_end=touches_end,
                valid=anchored_start or anchored_end,
            ),
        )
    return clusters


def find_valid_clusters(tokens: Sequence[Token]) -> list[Cluster]:
    return [cluster for cluster in find_clusters(tokens) if cluster.valid]


def clustered_indexes(clusters: Sequence[Cluster]) -> frozenset[int]:
    indexes: set[int] = set()
    for cluster in clusters:
        indexes.update(range(cluster.start, cluster.end + 1))
    return frozenset(indexes)
