#!/usr/bin/env python3
"""List current JMA events and print converted event details.

Fetches both JMA feeds, prints the extracted EventIDs, then converts one
event (the first listed, or the one given with --id) and prints its JSON.

Usage:
    # List events and convert the first one
    python scripts/convert_events.py

    # Convert a specific event from the fixture source
    python scripts/convert_events.py --id 20240101071409_0_VTSE41_010000 --debug

    # Serve despite validation findings
    python scripts/convert_events.py --force
    python scripts/convert_events.py --ignore-warning

    # Convert every listed event
    python scripts/convert_events.py --all

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quake.core.config import ConversionPolicy
from quake.core.errors import PipelineError
from quake.orchestrator import Orchestrator
from quake.shell.config_loader import load_config

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Convert JMA events to normalized JSON")
    parser.add_argument("--id", help="EventID to convert (default: first listed event)")
    parser.add_argument("--all", action="store_true", help="Convert every listed event")
    parser.add_argument("--debug", action="store_true", help="Read reports from the fixture source")
    parser.add_argument("--force", action="store_true", help="Ignore validation errors")
    parser.add_argument("--ignore-warning", action="store_true", help="Ignore validation warnings")
    args = parser.parse_args()

    config = load_config()
    orchestrator = Orchestrator(config)
    policy = ConversionPolicy(
        force=args.force or config.policy.force,
        ignore_warning=args.ignore_warning or config.policy.ignore_warning,
    )

    if args.id:
        event_ids = [args.id]
    else:
        try:
            event_ids = orchestrator.list_events()
        except PipelineError as e:
            logger.error("Failed to list events: %s", e)
            return 1

        print(f"Total: {len(event_ids)}")
        for event_id in event_ids:
            print(event_id)

        if not event_ids:
            return 0
        if not args.all:
            event_ids = event_ids[:1]

    results = orchestrator.get_many_event_details(event_ids, policy=policy, debug=args.debug)

    failed = 0
    for result in results:
        if result.success:
            print(result.json)
        else:
            failed += 1
            print(f"{result.event_id}: {type(result.error).__name__}: {result.error}", file=sys.stderr)
            for finding in result.error.findings:
                print(f"  {finding}", file=sys.stderr)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
