"""Weighted-stage progress reporting and cooperative cancellation."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


@dataclass(frozen=True)
class Stage:
    """One sequential phase of an import and its window of overall progress"""

    name: str
    start: float
    end: float


# Non-overlapping windows of the 0-100 range, in execution order
IMPORT_STAGES = (
    Stage("fetch", 10, 20),
    Stage("board", 20, 30),
    Stage("tags", 30, 40),
    Stage("tasks", 40, 80),
    Stage("subtasks", 80, 95),
    Stage("history", 95, 100),
)


class StageProgress:
    """Map stage-local 0..1 fractions onto the global 0..100 range.

    Reported values never decrease, even if a stage reports a smaller
    fraction than before. Exceptions raised by the callback are logged and
    ignored so a broken progress display cannot abort an import.

    Example:
        >>> progress = StageProgress(print)
        >>> progress.update("tasks", 0.5, "Importing tasks... 50%")
        60.0 Importing tasks... 50%
        60.0
    """

    def __init__(
        self,
        callback: ProgressCallback | None = None,
        stages: tuple[Stage, ...] = IMPORT_STAGES,
    ):
        self.callback = callback
        self.stages = {stage.name: stage for stage in stages}
        self.percent = 0.0

    def update(self, stage_name: str, fraction: float, message: str) -> float:
        stage = self.stages[stage_name]
        fraction = min(max(fraction, 0.0), 1.0)
        percent = stage.start + (stage.end - stage.start) * fraction
        return self._report(percent, message)

    def begin(self, stage_name: str, message: str) -> float:
        return self.update(stage_name, 0.0, message)

    def finish(self, stage_name: str, message: str) -> float:
        return self.update(stage_name, 1.0, message)

    def stage_callback(
        self, stage_name: str, label: str
    ) -> Callable[[float], None]:
        """Callback for a stage that reports fractions, with a "label... N%" message"""

        def report(fraction: float) -> None:
            self.update(stage_name, fraction, f"{label}... {round(fraction * 100)}%")

        return report

    def complete(self, message: str = "Import complete!") -> float:
        return self._report(100.0, message)

    def _report(self, percent: float, message: str) -> float:
        self.percent = max(self.percent, round(percent, 2))
        logger.debug("Progress %.0f%%: %s", self.percent, message)
        if self.callback:
            try:
                self.callback(self.percent, message)
            except Exception as e:
                logger.warning("Progress callback failed: %s", e)
        return self.percent


class CancelToken:
    """Thread-safe flag a caller sets to stop an import between items.

    Writes already sent to the store are not rolled back.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
