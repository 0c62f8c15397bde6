from __future__ import annotations

import argparse
import logging

from mhw_sync.config import get_settings
from mhw_sync.errors import SyncError
from mhw_sync.export import write_ics
from mhw_sync.gsheets import open_workbook
from mhw_sync.schedule import ScheduleFetcher
from mhw_sync.update import run_update


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Update the MHW events spreadsheet from the event schedule")
    parser.add_argument("--dry-run", action="store_true", help="Show actions without modifying the spreadsheet")
    parser.add_argument("--ics", type=str, default=None, help="Also write the events to this .ics file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        settings = get_settings()
        workbook = open_workbook(settings)
        with ScheduleFetcher(settings.fetch_timeout_ms, settings.artifacts_dir) as fetcher:
            events, _ = run_update(workbook, fetcher.fetch_text, settings.source_urls, dry_run=args.dry_run)
    except SyncError as exc:
        logging.error("Update failed: %s", exc)
        return 1

    if args.ics:
        write_ics(events, args.ics)

    logging.info("Done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
