"""Command line interface for rolling-mad."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from . import __version__
from .config import MadConfig, load_config_file
from .errors import ConfigurationError
from .logging_utils import configure_logging
from .pipeline import score_file
from .service import create_app
from .streaming.sources import record_rows


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2))
    else:
        print(result)


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


def _print_table(rows: list[dict[str, Any]]) -> None:
    if not rows:
        return
    columns = list(rows[0].keys())
    print("\t".join(columns))
    for row in rows:
        print("\t".join(_format_value(row[c]) for c in columns))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rmad",
        description="Rolling median absolute deviation and outlier cutoff scores for ordered observations.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    score = subparsers.add_parser("score", help="Score a file of observations")
    score.add_argument("samples", type=Path, help="Path to CSV/Parquet/JSON/JSONL observations")
    score.add_argument("--config", type=Path, help="YAML or JSON file with setsize/cconst")
    score.add_argument("--setsize", type=int, help="Window size K (default: 10)")
    score.add_argument("--cconst", type=float, help="Consistency constant C (default: 1.4826)")
    score.add_argument("--value-column", type=str, help="Column holding the observations")
    score.add_argument("--partition-column", type=str, help="Column splitting the input into independent streams")
    score.add_argument("--workers", type=int, default=1, help="Threads used for partitioned input")
    score.add_argument("--output", type=Path, help="Optional CSV or JSON path for the records")
    score.add_argument("--json", action="store_true", help="Emit records as JSON to stdout")

    validate = subparsers.add_parser("validate", help="Validate a configuration file")
    validate.add_argument("config", type=Path, help="Path to configuration file")
    validate.add_argument("--json", action="store_true", help="Emit validation result as JSON")

    serve = subparsers.add_parser("serve", help="Run FastAPI service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("version", help="Display the installed version")

    return parser


def _cmd_score(args: argparse.Namespace) -> int:
    base = MadConfig.from_file(args.config) if args.config else MadConfig()
    cfg = base.with_overrides(setsize=args.setsize, cconst=args.cconst)
    summary = score_file(
        args.samples,
        args.output,
        cfg,
        value_column=args.value_column,
        partition_column=args.partition_column,
        max_workers=args.workers,
    )
    rows = record_rows(summary["records"])
    if args.json:
        _print_result({"config": summary["config"], "records": rows, "errors": summary["errors"]}, as_json=True)
    elif not args.output:
        _print_table(rows)
    if args.output:
        # stdout stays parseable when --json is also given
        print(
            f"Wrote {summary['rows']} records ({summary['scored']} scored) to {summary['output']}",
            file=sys.stderr if args.json else sys.stdout,
        )
    for error in summary["errors"]:
        label = f" (partition {error['partition']})" if error["partition"] else ""
        print(f"Error{label} at row {error['rownum']}: {error['message']}", file=sys.stderr)
    return 1 if summary["errors"] else 0


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        cfg = MadConfig.from_mapping(load_config_file(args.config))
    except ConfigurationError as exc:
        _print_result({"valid": False, "errors": [str(exc)]}, as_json=args.json)
        return 1
    _print_result({"valid": True, "errors": [], "normalized": cfg.model_dump()}, as_json=args.json)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)

    if args.command == "score":
        try:
            return _cmd_score(args)
        except (ConfigurationError, FileNotFoundError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2
    if args.command == "validate":
        return _cmd_validate(args)
    if args.command == "serve":
        app = create_app()
        try:
            import uvicorn
        except ModuleNotFoundError:
            raise SystemExit("uvicorn is required to run the service. Install with `pip install uvicorn`.")
        uvicorn.run(app, host=args.host, port=args.port)
        return 0
    if args.command == "version":
        print(__version__)
    return 0


if __name__ == "__main__":
    sys.exit(main())
