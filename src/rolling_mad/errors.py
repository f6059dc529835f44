"""Error taxonomy for MAD streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


class MadError(Exception):
    """Base class for all rolling-mad errors."""


class ConfigurationError(MadError, ValueError):
    """Raised before streaming starts when parameters are unusable."""


class InvalidObservationError(MadError, ValueError):
    """Raised for an observation that is neither a finite number nor missing."""


class StreamAbortedError(MadError):
    """Raised by :meth:`StreamResult.raise_for_error` for an aborted stream."""

    def __init__(self, error: "StreamError") -> None:
        super().__init__(f"Stream aborted at row {error.rownum}: {error.message}")
        self.error = error


@dataclass(frozen=True)
class StreamError:
    """Tagged per-row fault that ended a stream."""

    kind: str
    rownum: int
    message: str

    @classmethod
    def from_exception(cls, exc: Exception, rownum: int) -> "StreamError":
        kind = "invalid_observation" if isinstance(exc, InvalidObservationError) else "runtime"
        return cls(kind=kind, rownum=rownum, message=str(exc) or type(exc).__name__)

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "rownum": self.rownum, "message": self.message}
