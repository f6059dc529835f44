"""Rolling median absolute deviation over a sliding window of observations."""

from importlib import metadata

from .config import DEFAULT_SETSIZE, MadConfig, load_config_file
from .engine import MadEngine, StreamState
from .errors import (
    ConfigurationError,
    InvalidObservationError,
    MadError,
    StreamAbortedError,
    StreamError,
)
from .models import Observation, OutputRecord, StepOutcome, StreamResult
from .pipeline import run_partitions, run_stream, score_file
from .statistics import (
    DEFAULT_CCONST,
    WindowStatistics,
    cutoff_score,
    median_absolute_deviation,
    window_median,
    window_statistics,
)
from .streaming import WindowBuffer, load_observations, load_partitions, write_records

try:
    __version__ = metadata.version("rolling-mad")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.1.0"

__all__ = [
    "DEFAULT_CCONST",
    "DEFAULT_SETSIZE",
    "MadConfig",
    "load_config_file",
    "MadEngine",
    "StreamState",
    "ConfigurationError",
    "InvalidObservationError",
    "MadError",
    "StreamAbortedError",
    "StreamError",
    "Observation",
    "OutputRecord",
    "StepOutcome",
    "StreamResult",
    "run_stream",
    "run_partitions",
    "score_file",
    "WindowStatistics",
    "cutoff_score",
    "median_absolute_deviation",
    "window_median",
    "window_statistics",
    "WindowBuffer",
    "load_observations",
    "load_partitions",
    "write_records",
    "__version__",
]
