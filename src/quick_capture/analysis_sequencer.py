from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

from quick_capture.domain.models import AnalysisResult

T = TypeVar("T")

DEFAULT_DEBOUNCE_SECONDS = 0.3


class AnalysisSequencer(Generic[T]):
    """Generation counter that drops results of superseded requests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current = 0
        self._latest: T | None = None
        self._latest_token = 0

    def begin(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current

    def deliver(self, token: int, result: T | None) -> bool:
        with self._lock:
            if token != self._current:
                return False
            self._latest = result
            self._latest_token = token
            return True

    @property
    def latest(self) -> T | None:
        with self._lock:
            return self._latest

    @property
    def latest_token(self) -> int:
        with self._lock:
            return self._latest_token


class DebouncedAnalyzer:
    """Runs ``analyze`` once typing pauses for ``delay_seconds``.

    Each ``submit`` cancels the pending run. A run that finishes after a newer
    submission is discarded, so callers only ever see the latest text's result.
    """

    def __init__(
        self,
        analyze: Callable[[str], AnalysisResult],
        *,
        delay_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_result: Callable[[AnalysisResult | None], None] | None = None,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._analyze = analyze
        self.delay_seconds = delay_seconds
        self._on_result = on_result
        self._sequencer: AnalysisSequencer[AnalysisResult] = AnalysisSequencer()
        self._pending: asyncio.Task[AnalysisResult | None] | None = None

    @property
    def latest(self) -> AnalysisResult | None:
        return self._sequencer.latest

    def submit(self, text: str) -> asyncio.Task[AnalysisResult | None]:
        token = self._sequencer.begin()
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        task = asyncio.create_task(self._run(token, text))
        self._pending = task
        return task

    async def flush(self) -> AnalysisResult | None:
        """Wait for the pending run, if any, and return the latest delivered result."""
        pending = self._pending
        if pending is not None:
            try:
                await pending
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
        return self.latest

    async def _run(self, token: int, text: str) -> AnalysisResult | None:
        if not text.strip():
            self._publish(token, None)
            return None

        await asyncio.sleep(self.delay_seconds)
        if not self._sequencer.is_current(token):
            logger.debug(f"Skipping superseded analysis request {token}")
            return None

        result = self._analyze(text)
        if not self._publish(token, result):
            return None
        return result

    def _publish(self, token: int, result: AnalysisResult | None) -> bool:
        if not self._sequencer.deliver(token, result):
            logger.debug(f"Discarding stale analysis result for request {token}")
            return False
        if self._on_result is not None:
            self._on_result(result)
        return True
