#!/usr/bin/env python3
"""
Standalone data fetcher that writes the latest league snapshot to JSON.

Intended for scheduled runs (e.g., a cron job) so consumers can read a
static file instead of calling the providers themselves.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from league_tracker import ScoreFetcher, Settings

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch ESPN and Sleeper league scores and write JSON output.")
    parser.add_argument(
        "--output",
        default="public/data/snapshot.json",
        help="Path to write the snapshot JSON (default: public/data/snapshot.json).",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Number of spaces for JSON indentation (default: 2).",
    )
    parser.add_argument(
        "--week",
        type=int,
        default=None,
        help="NFL week to fetch (default: TRACKER_WEEK or the current week).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, fetcher: Optional[ScoreFetcher] = None) -> int:
    args = parse_args(argv)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if fetcher is None:
        settings = Settings.from_env()
        logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")
        if args.week:
            settings = replace(settings, week=args.week)
        fetcher = ScoreFetcher(settings)

    snapshot = fetcher.build_snapshot()
    if snapshot is None:
        logger.error("Refresh was cancelled; nothing written")
        return 1

    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(snapshot, handle, indent=args.indent)
        handle.write("\n")

    logger.info("Snapshot written to %s (week %s)", output_path, snapshot.get("week"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
