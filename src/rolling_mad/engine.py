"""Per-stream rolling MAD engine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Mapping

from .config import MadConfig, resolve_config
from .errors import StreamError
from .logging_utils import log_event
from .models import Observation, OutputRecord, StepOutcome, StreamResult
from .statistics import window_statistics
from .streaming.buffering import WindowBuffer

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    WARMUP = "warmup"
    STEADY = "steady"


class MadEngine:
    """Consumes observations in arrival order and emits one record per observation.

    The engine owns its window exclusively. Create one engine per stream; two
    streams must never share an instance.
    """

    def __init__(
        self,
        config: MadConfig | Mapping[str, Any] | None = None,
        *,
        setsize: int | None = None,
        cconst: float | None = None,
    ) -> None:
        self.config = resolve_config(config, setsize=setsize, cconst=cconst)
        self.window = WindowBuffer(self.config.setsize)
        self._rownum = 1

    @property
    def rownum(self) -> int:
        """Sequence number the next record will carry."""

        return self._rownum

    @property
    def state(self) -> StreamState:
        return StreamState.STEADY if self.window.is_full() else StreamState.WARMUP

    def process(self, observation: Any) -> OutputRecord:
        """Process one observation; raises on invalid input."""

        obs = Observation.coerce(observation)
        rownum = self._rownum
        if obs.is_missing:
            record = OutputRecord(rownum=rownum)
        else:
            was_warming_up = not self.window.is_full()
            self.window.admit(obs.value)  # type: ignore[arg-type]
            if self.window.is_full():
                if was_warming_up:
                    log_event(logger, "window_full", level=logging.DEBUG, rownum=rownum, setsize=self.config.setsize)
                stats = window_statistics(self.window.snapshot(), self.config.cconst)
                if stats.mad == 0:
                    log_event(logger, "zero_mad", level=logging.DEBUG, rownum=rownum, cutoff=stats.cutoff)
                record = OutputRecord(rownum=rownum, median=stats.median, mad=stats.mad, cutoff=stats.cutoff)
            else:
                record = OutputRecord(rownum=rownum)
        self._rownum += 1
        return record

    def try_process(self, observation: Any) -> StepOutcome:
        """Like :meth:`process` but returns a tagged error instead of raising."""

        try:
            return StepOutcome(record=self.process(observation))
        except Exception as exc:
            return StepOutcome(error=StreamError.from_exception(exc, rownum=self._rownum))

    def run(self, observations: Iterable[Any]) -> StreamResult:
        """Drive the engine over ``observations``, stopping at the first error."""

        result = StreamResult()
        for observation in observations:
            outcome = self.try_process(observation)
            if not outcome.ok:
                result.error = outcome.error
                logger.error("Stream aborted at row %s: %s", outcome.error.rownum, outcome.error.message)  # type: ignore[union-attr]
                break
            result.records.append(outcome.record)  # type: ignore[arg-type]
        return result
