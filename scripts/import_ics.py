"""Import league schedules from ``.ics`` files on the command line.

Matches are merged into the local import store (``TTCLUB_APPDATA``). With
``--push`` the newly imported matches are also inserted into the Supabase
``matches`` table using the service role key, so keep this to trusted
admin machines.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from ttclub.ics_import import ImportSummary, import_ics_content, push_matches_to_schedule
from ttclub.ics_parser import AUTO_DETECT_TEAM
from ttclub.time_utils import local_date_label
from ttclub.utils.supa import SupabaseConfigError, SupabaseConnectionError, get_service_client

logger = logging.getLogger("ttclub.import_ics")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import .ics match schedules")
    parser.add_argument("files", nargs="+", help="Calendar files to import")
    parser.add_argument(
        "--team",
        default=None,
        help=f"Team to assign to all matches (default: {AUTO_DETECT_TEAM})",
    )
    parser.add_argument("--push", action="store_true", help="Insert new matches into Supabase")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _print_summary(path: Path, summary: ImportSummary) -> None:
    if not summary.parsed:
        print(f"{path.name}: keine gültigen Termine gefunden")
        return
    print(
        f"{path.name}: {len(summary.imported)} neue Spiele, "
        f"{summary.duplicates} bereits vorhanden ({summary.history['team']})"
    )
    for row in summary.imported:
        print(f"  {local_date_label(row['date'])} {row['time']}  {row['team']} – {row['opponent']}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    assigned = None if args.team in (None, AUTO_DETECT_TEAM) else args.team
    new_matches = []
    found_any = False
    for name in args.files:
        path = Path(name)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot read %s: %s", path, exc)
            continue
        summary = import_ics_content(content, path.name, assigned)
        found_any = found_any or summary.parsed > 0
        new_matches.extend(summary.imported)
        _print_summary(path, summary)

    if args.push and new_matches:
        try:
            client = get_service_client()
        except (SupabaseConfigError, SupabaseConnectionError) as exc:
            logger.error("%s", exc)
            return 1
        result = push_matches_to_schedule(new_matches, client=client)
        if not result.ok:
            return 1
        print(f"{len(new_matches)} Spiele wurden in den Spielplan übernommen.")

    return 0 if found_any else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
