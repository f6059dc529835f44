"""Stream drivers: single stream, independent partitions, and file scoring."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

from .config import MadConfig, resolve_config
from .engine import MadEngine
from .logging_utils import log_event
from .models import StreamResult
from .streaming.sources import load_observations, load_partitions, write_records

logger = logging.getLogger(__name__)


def run_stream(
    observations: Iterable[Any],
    config: MadConfig | Mapping[str, Any] | None = None,
    *,
    setsize: int | None = None,
    cconst: float | None = None,
) -> StreamResult:
    """Run one stream on a fresh engine.

    Configuration errors raise before any observation is read; per-row faults
    end the stream and are reported through :attr:`StreamResult.error`.
    """

    engine = MadEngine(config, setsize=setsize, cconst=cconst)
    result = engine.run(observations)
    log_event(
        logger,
        "stream_complete" if result.ok else "stream_aborted",
        level=logging.DEBUG if result.ok else logging.WARNING,
        rows=len(result.records),
        setsize=engine.config.setsize,
        error=result.error.as_dict() if result.error else None,
    )
    return result


def run_partitions(
    partitions: Mapping[str, Iterable[Any]],
    config: MadConfig | Mapping[str, Any] | None = None,
    *,
    max_workers: int = 1,
) -> Dict[str, StreamResult]:
    """Run each partition as an independent stream with its own engine."""

    cfg = resolve_config(config)
    if max_workers <= 1 or len(partitions) <= 1:
        return {key: run_stream(values, cfg) for key, values in partitions.items()}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {key: pool.submit(run_stream, values, cfg) for key, values in partitions.items()}
        return {key: future.result() for key, future in futures.items()}


def score_file(
    samples_path: str | Path,
    output_path: str | Path | None = None,
    config: MadConfig | Mapping[str, Any] | None = None,
    *,
    value_column: str | None = None,
    partition_column: str | None = None,
    max_workers: int = 1,
) -> Dict[str, Any]:
    """Score every observation in a file and optionally write the records.

    Returns a summary mapping. Records emitted before an abort are still
    written; ``summary["errors"]`` lists the tagged errors per stream.
    """

    cfg = resolve_config(config)
    samples_path = Path(samples_path)

    if partition_column:
        partitions = load_partitions(samples_path, partition_column, value_column=value_column)
        results = run_partitions(partitions, cfg, max_workers=max_workers)
    else:
        results = {"": run_stream(load_observations(samples_path, value_column=value_column), cfg)}

    records = {key: r.records for key, r in results.items()}
    payload: Any = records if partition_column else records[""]
    errors = [{"partition": key, **r.error.as_dict()} for key, r in results.items() if r.error]

    summary: Dict[str, Any] = {
        "source": str(samples_path),
        "config": cfg.model_dump(),
        "partitions": len(results) if partition_column else None,
        "rows": sum(len(r) for r in records.values()),
        "scored": sum(1 for r in records.values() for rec in r if rec.has_statistics),
        "errors": errors,
        "output": None,
        "records": payload,
    }

    if output_path:
        summary["output"] = str(write_records(payload, output_path))

    log_event(
        logger,
        "scoring_complete",
        source=str(samples_path),
        rows=summary["rows"],
        scored=summary["scored"],
        errors=len(errors),
    )
    return summary
