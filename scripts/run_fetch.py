#!/usr/bin/env python3
"""Run one ingestion pass."""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config.logging_setup import configure_logging
from src.pipeline.orchestrator import run_fetch


def main():
    parser = argparse.ArgumentParser(description="Fetch new articles from all enabled sources.")
    parser.add_argument("--log-level", default=None, help="Override NEWSFEED_LOG_LEVEL")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    args = parser.parse_args()

    configure_logging(level=args.log_level, json_output=args.json_logs or None)

    print("\n" + "=" * 50)
    print("NEWSFEED INGESTION")
    print("=" * 50 + "\n")

    result = asyncio.run(run_fetch())

    print(f"\n{result.message}")
    if result.failed_sources:
        print(f"  Failed sources: {', '.join(result.failed_sources)}")

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
