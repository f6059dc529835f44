"""CLI wrapper to score a file of observations."""

from __future__ import annotations

import argparse
from pathlib import Path

from rolling_mad import MadConfig, score_file


def main() -> None:
    parser = argparse.ArgumentParser(description="Score observations with a rolling MAD window")
    parser.add_argument("samples", type=Path, help="CSV/JSON file with observations")
    parser.add_argument("output", type=Path, help="Destination CSV or JSON for the records")
    parser.add_argument("--setsize", type=int, default=10, help="Window size K")
    parser.add_argument("--cconst", type=float, default=1.4826, help="Consistency constant C")
    args = parser.parse_args()

    summary = score_file(args.samples, args.output, MadConfig.from_mapping({"setsize": args.setsize, "cconst": args.cconst}))
    print(f"Scored {summary['scored']} of {summary['rows']} records from {args.samples}")


if __name__ == "__main__":
    main()
