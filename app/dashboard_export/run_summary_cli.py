from __future__ import annotations

"""CLI helper for printing run-level routing summaries."""

import argparse
from typing import Sequence

from . import telemetry


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser for the run summary CLI."""

    parser = argparse.ArgumentParser(
        description="Show routing summary for a scrape run.",
    )
    parser.add_argument(
        "--run-id",
        help="Run ID to summarise.",
    )
    parser.add_argument(
        "--latest",
        action="store_true",
        help="Summarise the most recent run.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the run summary CLI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.run_id is None and not args.latest:
        parser.error("You must provide --run-id or --latest")

    payload = telemetry.load_run(args.run_id)
    if payload is None:
        parser.error(f"Run {args.run_id} does not exist" if args.run_id else "No runs recorded")

    print(f"Run {payload['run_id']} ({payload.get('status', 'unknown')})")
    for status, count in sorted(payload.get("summary", {}).items()):
        print(f"  {status.replace('count_', '')}: {count}")

    pages = payload.get("pages") or []
    if pages:
        print("\nPages:")
        for page in pages:
            print(f"  {page.get('url')}: {page.get('status')} {page.get('dashboard', '')}".rstrip())

    if payload.get("error"):
        print(f"\nError: {payload['error']}")

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
