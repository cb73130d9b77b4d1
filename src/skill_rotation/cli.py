from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .calculator import find_best_setup
from .config import ConfigError, default_config, load_config, validate_setup
from .formatting import format_progress, format_report, result_to_dict
from .models import GearAssignment, OptimizationResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skill-rotation",
        description=(
            "Find the gear choice and cast sequence that deal the most damage inside a fixed time window."
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON/YAML skill configuration. The bundled demo skill set is used when omitted.",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        default=None,
        help="Override the time window (seconds) from the configuration.",
    )
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format for the final report.",
    )
    parser.add_argument(
        "--timeline",
        action="store_true",
        help="Show start/end times of every cast (table output only).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Evaluate gear combinations in this many worker processes.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print a progress line per gear combination.",
    )
    parser.add_argument("--log-level", default="warning")
    return parser


def _print_progress(index: int, total: int, gear: GearAssignment) -> None:
    print(format_progress(index, total, gear), flush=True)


def _print_json(result: OptimizationResult) -> None:
    json.dump(result_to_dict(result), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(Path(args.config)) if args.config else default_config()
        time_limit = config.time_limit if args.time_limit is None else args.time_limit
        validate_setup(config.skills, time_limit)
    except ConfigError as exc:
        parser.error(str(exc))
        return 2

    progress = None if args.quiet or args.format == "json" else _print_progress

    try:
        result = find_best_setup(
            config.skills,
            time_limit,
            progress_callback=progress,
            workers=args.workers,
        )
    except ConfigError as exc:
        parser.error(str(exc))
        return 2

    if args.format == "json":
        _print_json(result)
    else:
        print()
        print(format_report(result, include_timeline=args.timeline))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
