"""
Run the inventory sync without the API.

Usage:
    # One cycle now, then one every SYNC_INTERVAL_SECONDS (Ctrl+C to stop)
    python scripts/run_sync.py

    # Exactly one cycle; exit status 1 if it failed
    python scripts/run_sync.py --once

    # Print the persisted last-synced quantities
    python scripts/run_sync.py --show-state
"""

import argparse
import json
import os
import sys

# Allow imports from the project root when running as a script
_root_dir = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, _root_dir)

from config import Settings, get_settings, configure_logging
from services.scheduler_service import get_sync_scheduler
from services.sync_state_service import SyncStateStore


def show_state(settings: Settings) -> int:
    """Print every stored snapshot as JSON."""
    store = SyncStateStore(settings.state_file)
    store.load()
    snapshots = {key: snap.model_dump() for key, snap in sorted(store.all().items())}
    print(json.dumps(snapshots, indent=2))
    print(f"\n{len(snapshots)} pair(s) tracked in {settings.state_file}")
    return 0


def run_once() -> int:
    """Run a single cycle and print its summary."""
    scheduler = get_sync_scheduler()
    result = scheduler.run_once()
    if result is None:
        print(f"[ERROR] Sync cycle failed: {scheduler.last_error}")
        return 1

    for sync_pass in result.passes:
        print(
            f"[OK] {sync_pass.direction.value}: fetched={sync_pass.fetched} "
            f"processed={sync_pass.processed} pushed={sync_pass.pushed} "
            f"throttled={sync_pass.skipped_throttled} errors={len(sync_pass.errors)}"
        )
    print(f"[OK] {result.pairs_tracked} pair(s) tracked")
    return 0


def run_forever() -> int:
    """Run the scheduler in the foreground."""
    scheduler = get_sync_scheduler()
    print(f"Starting inventory sync every {scheduler.interval_seconds}s (Ctrl+C to stop)")
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        scheduler.stop()
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Marianatek <-> Webflow inventory sync")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--once", action="store_true", help="run a single cycle and exit")
    group.add_argument("--show-state", action="store_true", help="print persisted sync state")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)

    if args.show_state:
        return show_state(settings)
    if args.once:
        return run_once()
    return run_forever()


if __name__ == "__main__":
    sys.exit(main())
