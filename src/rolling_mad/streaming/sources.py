"""File-backed observation sources and record sinks."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import numpy as np
import pandas as pd

from ..models import OUTPUT_COLUMNS, OutputRecord

logger = logging.getLogger(__name__)

TABLE_SUFFIXES = {".csv", ".txt", ".parquet"}


def _read_table(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".parquet":
        try:
            return pd.read_parquet(path)
        except ImportError as exc:  # pragma: no cover - optional engine detail
            raise ImportError("pyarrow or fastparquet is required to read Parquet files") from exc
    return pd.read_csv(path)


def _pick_value_column(df: pd.DataFrame, value_column: str | None, exclude: Sequence[str] = ()) -> str:
    if value_column is not None:
        if value_column not in df.columns:
            raise ValueError(f"Column '{value_column}' not found (columns: {list(df.columns)})")
        return value_column
    if "value" in df.columns:
        return "value"
    candidates = [c for c in df.columns if c not in exclude]
    numeric = [c for c in df.select_dtypes(include=[np.number]).columns if c not in exclude]
    if numeric:
        return numeric[0]
    if not candidates:
        raise ValueError("Dataset must contain at least one value column")
    return candidates[0]


def _column_values(series: pd.Series) -> List[Any]:
    # NaN cells stay missing; anything else is left for the engine to validate
    return [None if pd.isna(value) else value for value in series.tolist()]


def _read_json_rows(path: Path) -> List[Any]:
    if path.suffix.lower() == ".jsonl":
        rows: List[Any] = []
        for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{lineno}: invalid JSON line") from exc
        return rows
    loaded = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(loaded, list):
        raise ValueError("JSON observation file must contain a list")
    return loaded


def _row_value(row: Any, value_column: str | None) -> Any:
    if isinstance(row, Mapping):
        return row.get(value_column or "value")
    return row


def load_observations(path: str | Path, value_column: str | None = None) -> List[Any]:
    """Load observations from CSV, Parquet, JSON list, or JSONL, keeping missing values as ``None``."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Observation file not found: {path}")

    if path.suffix.lower() in {".json", ".jsonl"}:
        return [_row_value(row, value_column) for row in _read_json_rows(path)]

    df = _read_table(path)
    return _column_values(df[_pick_value_column(df, value_column)])


def load_partitions(
    path: str | Path,
    partition_column: str,
    value_column: str | None = None,
) -> Dict[str, List[Any]]:
    """Split a file into independent streams keyed by ``partition_column``.

    Partitions keep the order in which their keys first appear and each
    partition keeps the file order of its rows.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Observation file not found: {path}")

    partitions: Dict[str, List[Any]] = {}
    if path.suffix.lower() in {".json", ".jsonl"}:
        for row in _read_json_rows(path):
            if not isinstance(row, Mapping) or partition_column not in row:
                raise ValueError(f"Every row needs a '{partition_column}' field to partition JSON input")
            partitions.setdefault(str(row[partition_column]), []).append(_row_value(row, value_column))
        return partitions

    df = _read_table(path)
    if partition_column not in df.columns:
        raise ValueError(f"Partition column '{partition_column}' not found (columns: {list(df.columns)})")
    column = _pick_value_column(df, value_column, exclude=[partition_column])
    for key, group in df.groupby(partition_column, sort=False, dropna=False):
        partitions[str(key)] = _column_values(group[column])
    return partitions


def encode_value(value: float | None) -> float | str | None:
    """Encode a statistic for CSV/JSON output; non-finite values become strings."""

    if value is None:
        return None
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def record_rows(
    records: Iterable[OutputRecord] | Mapping[str, Iterable[OutputRecord]],
) -> List[Dict[str, Any]]:
    """Flatten records (optionally keyed by partition) into encoded row dicts."""

    if isinstance(records, Mapping):
        rows: List[Dict[str, Any]] = []
        for key, part in records.items():
            rows.extend({"partition": key, **row} for row in record_rows(part))
        return rows
    return [
        {"rownum": r.rownum, "median": encode_value(r.median), "mad": encode_value(r.mad), "cutoff": encode_value(r.cutoff)}
        for r in records
    ]


def write_records(
    records: Iterable[OutputRecord] | Mapping[str, Iterable[OutputRecord]],
    path: str | Path,
) -> Path:
    """Write records as CSV (empty cells for absent statistics) or JSON (``null``)."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = record_rows(records)
    if path.suffix.lower() == ".json":
        path.write_text(json.dumps(rows, indent=2), encoding="utf-8")
    else:
        columns = (["partition"] if isinstance(records, Mapping) else []) + list(OUTPUT_COLUMNS)
        df = pd.DataFrame(rows, columns=columns, dtype=object)
        df.to_csv(path, index=False)
    logger.debug("Wrote %s records to %s", len(rows), path)
    return path
