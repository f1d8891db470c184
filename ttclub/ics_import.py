"""Import league schedules from ``.ics`` files.

Parsed events become match records that are kept in a local JSON store until
they are pushed to the Supabase ``matches`` table. Re-importing the same file
is safe: events are de-duplicated by their calendar ``UID``.
"""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from ttclub.app_paths import file_path
from ttclub.database import DatabaseService, QueryResult
from ttclub.db_tables import MATCHES
from ttclub.ics_parser import CalendarEvent, parse_ics
from ttclub.supabase_client import get_client
from ttclub.time_utils import UTC, to_tz

logger = logging.getLogger(__name__)

MATCHES_FILE = "ics_imported_matches.json"
HISTORY_FILE = "ics_import_history.json"

AUTOMATIC_TEAM_LABEL = "Automatisch"
MULTIPLE_TEAMS_LABEL = "Mehrere Mannschaften"

# columns of the ``matches`` table filled from an import
SCHEDULE_COLUMNS = (
    "team",
    "opponent",
    "date",
    "time",
    "location",
    "status",
    "description",
    "home_team",
    "away_team",
    "club_team",
    "home_score",
    "away_score",
)

_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


class MergeResult(NamedTuple):
    unique: List[Dict[str, Any]]
    updated: List[Dict[str, Any]]


class ImportSummary(NamedTuple):
    parsed: int
    imported: List[Dict[str, Any]]
    duplicates: int
    history: Dict[str, Any]


# ---------------------------------------------------------------------------
# Local store
# ---------------------------------------------------------------------------

def _read_json_list(name: str) -> List[Dict[str, Any]]:
    fp = str(file_path(name))
    if not os.path.exists(fp):
        return []
    try:
        with open(fp, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, list) else []
    except (OSError, ValueError) as exc:
        bak = fp + f".bak.{int(datetime.now().timestamp())}"
        logger.warning("Unreadable store %s (%s); moved to %s", fp, exc, bak)
        try:
            os.replace(fp, bak)
        except OSError:
            logger.warning("Could not move %s aside", fp)
        return []


def _write_json_list(name: str, rows: List[Dict[str, Any]]) -> None:
    fp = str(file_path(name))
    tmp = fp + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(rows, f, ensure_ascii=False, indent=2)
    os.replace(tmp, fp)


def load_imported_matches() -> List[Dict[str, Any]]:
    return [{**row, "source": "ics"} for row in _read_json_list(MATCHES_FILE)]


def save_imported_matches(rows: List[Dict[str, Any]]) -> None:
    _write_json_list(MATCHES_FILE, rows)


def load_import_history() -> List[Dict[str, Any]]:
    return _read_json_list(HISTORY_FILE)


def _add_history_entry(entry: Dict[str, Any]) -> None:
    _write_json_list(HISTORY_FILE, [entry, *load_import_history()])


def _match_start(row: Dict[str, Any]) -> datetime:
    try:
        return to_tz(row.get("date") or "", "UTC")
    except (TypeError, ValueError):
        return _FAR_FUTURE


def sorted_matches(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Imported matches in kickoff order; rows without a readable date go last."""
    return sorted(rows, key=_match_start)


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def _file_slug(file_name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "-", file_name).lower() or "ics"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _match_record(
    event: CalendarEvent,
    match_id: str,
    created_at: str,
    assigned_team: Optional[str],
) -> Dict[str, Any]:
    return {
        "id": match_id,
        "team": event.team,
        "opponent": event.opponent,
        "date": event.date,
        "time": event.time,
        "location": event.location,
        "status": event.status,
        "home_score": None,
        "away_score": None,
        "created_at": created_at,
        "description": event.description or None,
        "home_team": event.team,
        "away_team": event.opponent,
        "club_team": assigned_team or event.team,
        "source": "ics",
        "ics_uid": event.ics_uid,
    }


def merge_matches(
    events: Sequence[CalendarEvent],
    file_name: str,
    existing: Sequence[Dict[str, Any]],
    assigned_team: Optional[str] = None,
) -> MergeResult:
    """Add ``events`` to ``existing``, skipping already known UIDs and ids."""

    seen_ids = {row.get("id") for row in existing}
    seen_uids = {row.get("ics_uid") for row in existing if row.get("ics_uid")}
    base_id = _file_slug(file_name)
    now = _now_utc()
    created_at = now.isoformat()
    stamp = int(now.timestamp() * 1000)

    unique: List[Dict[str, Any]] = []
    for index, event in enumerate(events):
        match_id = f"ics-{event.ics_uid}" if event.ics_uid else f"ics-{base_id}-{index}-{stamp}"
        if event.ics_uid and event.ics_uid in seen_uids:
            continue
        if match_id in seen_ids:
            continue
        unique.append(_match_record(event, match_id, created_at, assigned_team))
        seen_ids.add(match_id)
        if event.ics_uid:
            seen_uids.add(event.ics_uid)

    updated = [*existing, *unique] if unique else list(existing)
    return MergeResult(unique, updated)


def assign_team(
    matches: Sequence[Dict[str, Any]],
    team: str,
    selected_ids: Optional[Iterable[str]] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    """Set ``club_team`` on the selected matches (all when nothing is selected)."""

    selected = set(selected_ids or ())
    targets = selected or {row.get("id") for row in matches}
    updated: List[Dict[str, Any]] = []
    count = 0
    for row in matches:
        current = row.get("club_team") or row.get("team")
        if row.get("id") in targets and current != team:
            updated.append({**row, "club_team": team})
            count += 1
        else:
            updated.append(row)
    return updated, count


def build_history_entry(
    file_name: str,
    matches: Sequence[Dict[str, Any]],
    count: int,
    assigned_team: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    teams = {row.get("club_team") or row.get("team") for row in matches}
    teams.discard(None)
    teams.discard("")

    label = assigned_team or AUTOMATIC_TEAM_LABEL
    if len(teams) == 1:
        label = next(iter(teams))
    elif len(teams) > 1:
        label = MULTIPLE_TEAMS_LABEL

    return {
        "file": file_name,
        "date": (today or date.today()).strftime("%d.%m.%Y"),
        "matches": count,
        "status": "success" if count > 0 else "error",
        "team": label,
    }


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

def import_ics_content(
    content: str,
    file_name: str,
    assigned_team: Optional[str] = None,
) -> ImportSummary:
    """Parse ``content``, merge it into the local store and record the import."""

    events = parse_ics(content, default_team=assigned_team)
    if not events:
        entry = build_history_entry(file_name, [], 0, assigned_team)
        _add_history_entry(entry)
        logger.info("No events found in %s", file_name)
        return ImportSummary(0, [], 0, entry)

    result = merge_matches(events, file_name, load_imported_matches(), assigned_team)
    save_imported_matches(result.updated)

    entry = build_history_entry(file_name, result.unique, len(result.unique), assigned_team)
    _add_history_entry(entry)
    duplicates = len(events) - len(result.unique)
    logger.info(
        "Imported %d of %d events from %s (%d already present)",
        len(result.unique),
        len(events),
        file_name,
        duplicates,
    )
    return ImportSummary(len(events), result.unique, duplicates, entry)


def assign_team_in_store(team: str, selected_ids: Optional[Iterable[str]] = None) -> int:
    """Assign ``team`` to stored matches; returns the number of changed rows."""
    updated, count = assign_team(load_imported_matches(), team, selected_ids)
    if count:
        save_imported_matches(updated)
    return count


def schedule_payload(row: Dict[str, Any]) -> Dict[str, Any]:
    return {column: row.get(column) for column in SCHEDULE_COLUMNS}


def push_matches_to_schedule(matches: Sequence[Dict[str, Any]], client: Any = None) -> QueryResult:
    """Insert imported matches into the Supabase ``matches`` table."""

    if client is None:
        client = get_client()
    payload = [schedule_payload(row) for row in matches]
    return DatabaseService(client).insert_many(MATCHES, payload)


__all__ = [
    "MergeResult",
    "ImportSummary",
    "load_imported_matches",
    "save_imported_matches",
    "load_import_history",
    "sorted_matches",
    "merge_matches",
    "assign_team",
    "build_history_entry",
    "import_ics_content",
    "assign_team_in_store",
    "schedule_payload",
    "push_matches_to_schedule",
]
