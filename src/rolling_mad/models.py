"""Record types exchanged between the engine and its drivers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from .errors import InvalidObservationError, StreamAbortedError, StreamError

OUTPUT_COLUMNS = ("rownum", "median", "mad", "cutoff")


@dataclass(frozen=True)
class Observation:
    """A single input value; ``value is None`` marks a missing observation."""

    value: Optional[float] = None

    @classmethod
    def coerce(cls, raw: Any) -> "Observation":
        """Build an observation from a raw value, treating ``None`` and NaN as missing."""

        if isinstance(raw, Observation):
            return raw
        if raw is None:
            return cls(None)
        if isinstance(raw, bool):
            raise InvalidObservationError(f"Observation must be numeric (got {raw!r})")
        try:
            value = float(raw)
        except (TypeError, ValueError) as exc:
            raise InvalidObservationError(f"Observation must be numeric (got {raw!r})") from exc
        if math.isnan(value):
            return cls(None)
        if math.isinf(value):
            raise InvalidObservationError(f"Observation must be finite (got {value})")
        return cls(value)

    @property
    def is_missing(self) -> bool:
        return self.value is None


class OutputRecord(BaseModel):
    """One emitted row: statistics are either all present or all absent."""

    model_config = ConfigDict(frozen=True)

    rownum: int
    median: Optional[float] = None
    mad: Optional[float] = None
    cutoff: Optional[float] = None

    @model_validator(mode="after")
    def _all_or_nothing(self) -> "OutputRecord":
        present = [v is not None for v in (self.median, self.mad, self.cutoff)]
        if any(present) and not all(present):
            raise ValueError("median, mad and cutoff must be all present or all absent")
        if self.rownum < 1:
            raise ValueError("rownum is 1-based")
        return self

    @property
    def has_statistics(self) -> bool:
        return self.median is not None

    def as_row(self) -> Tuple[int, Optional[float], Optional[float], Optional[float]]:
        return (self.rownum, self.median, self.mad, self.cutoff)


@dataclass
class StepOutcome:
    """Result of processing a single observation: a record or a tagged error."""

    record: Optional[OutputRecord] = None
    error: Optional[StreamError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class StreamResult:
    records: List[OutputRecord] = field(default_factory=list)
    error: Optional[StreamError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise StreamAbortedError(self.error)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "records": [r.model_dump() for r in self.records],
            "error": self.error.as_dict() if self.error else None,
        }
