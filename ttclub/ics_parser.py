"""Turn iCalendar (``.ics``) exports of league schedules into match records.

The parser is deliberately lenient: events without a usable ``DTSTART`` are
dropped, every other field falls back to a sensible default and no exception
is raised for malformed content.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, List, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ttclub.config import club_timezone
from ttclub.time_utils import local_hhmm, localize, utc_iso

logger = logging.getLogger(__name__)

AUTO_DETECT_TEAM = "Automatisch erkennen"
UNKNOWN_TEAM = "Unbekannte Mannschaft"
SCHEDULED = "scheduled"

KNOWN_TEAMS = (
    "herren i",
    "herren ii",
    "damen i",
    "damen ii",
    "jugend u18",
    "jugend u15",
    "schüler",
    "männer",
    "frauen",
)

OPPONENT_SEPARATORS = (" - ", " vs ", " gegen ", " @ ")

_EVENT_START = "BEGIN:VEVENT"
_EVENT_END = "END:VEVENT"
_FOLD_RE = re.compile(r"\n[ \t]")
_LOCAL_DT_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2})(\d{2})?)?$")
_LEADING_JUNK_RE = re.compile(r"^[^a-zA-Z0-9]+")


@dataclass(frozen=True)
class CalendarEvent:
    """One match read from a calendar entry."""

    team: str
    opponent: str
    date: str
    time: str
    location: str
    description: str
    status: str = SCHEDULED
    ics_uid: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


def unfold_lines(content: str) -> str:
    """Join folded continuation lines so every property sits on one line."""

    return _FOLD_RE.sub("", content.replace("\r\n", "\n")).strip()


def _split_property(line: str) -> tuple[str, str]:
    raw_key, sep, value = line.partition(":")
    if not sep:
        return "", ""
    key = raw_key.split(";", 1)[0].strip().upper()
    return key, value.strip()


def _read_properties(block: str) -> Dict[str, str]:
    props: Dict[str, str] = {}
    for raw_line in block.split("\n"):
        line = raw_line.strip()
        if line == _EVENT_END:
            break
        if not line:
            continue
        key, value = _split_property(line)
        if key:
            props[key] = value
    return props


def parse_ics_datetime(value: Optional[str], tz_name: Optional[str] = None) -> Optional[datetime]:
    """Parse a ``DTSTART`` value.

    ``...Z`` values are UTC timestamps; ``YYYYMMDD[THHMM[SS]]`` values are wall
    time in the club time zone. Out-of-range parts roll over, so ``T240000``
    is midnight of the next day and month 13 is January of the next year.
    Returns ``None`` when neither form applies.
    """

    if not value:
        return None
    cleaned = value.strip()

    if cleaned.endswith("Z"):
        try:
            return date_parser.isoparse(cleaned)
        except (ValueError, OverflowError):
            pass

    match = _LOCAL_DT_RE.match(cleaned)
    if not match:
        return None

    year, month, day, hour, minute, second = (int(part or 0) for part in match.groups())
    try:
        naive = datetime(year, 1, 1) + relativedelta(
            months=month - 1,
            days=day - 1,
            hours=hour,
            minutes=minute,
            seconds=second,
        )
    except (ValueError, OverflowError):
        return None
    return localize(naive, tz_name)


def _clean_summary(summary: str) -> str:
    return summary.replace("\\,", ",").strip()


def _normalize_description(description: Optional[str]) -> str:
    if not description:
        return ""
    return description.replace("\\n", "\n").strip()


def _title_case_words(text: str) -> str:
    return " ".join(part[:1].upper() + part[1:] for part in text.split(" "))


def determine_team(summary: str, categories: Optional[str], default_team: Optional[str] = None) -> str:
    if categories:
        return categories.strip()
    if default_team and default_team != AUTO_DETECT_TEAM:
        return default_team

    lowered = summary.lower()
    for known in KNOWN_TEAMS:
        if known in lowered:
            return _title_case_words(known)

    if " - " in summary:
        return summary.split(" - ")[0].strip()

    return default_team or UNKNOWN_TEAM


def determine_opponent(summary: str, team: str) -> str:
    team_lower = team.lower()
    for separator in OPPONENT_SEPARATORS:
        if separator not in summary:
            continue
        parts = [part.strip() for part in summary.split(separator)]
        first, second = parts[0], parts[1]
        if not second:
            continue
        if first.lower() == team_lower:
            return second
        if second.lower() == team_lower:
            return first
        return second

    if team_lower in summary.lower():
        stripped = re.sub(re.escape(team), "", summary, count=1, flags=re.IGNORECASE)
        return _LEADING_JUNK_RE.sub("", stripped).strip()

    return summary.strip()


def parse_ics(
    content: str,
    default_team: Optional[str] = None,
    tz_name: Optional[str] = None,
) -> List[CalendarEvent]:
    """Parse ``content`` into calendar events, preserving document order."""

    tz = tz_name or club_timezone()
    blocks = unfold_lines(content).split(_EVENT_START)[1:]
    events: List[CalendarEvent] = []

    for block in blocks:
        props = _read_properties(block)
        summary = _clean_summary(props.get("SUMMARY", ""))
        start = parse_ics_datetime(props.get("DTSTART"), tz)
        if start is None:
            logger.debug("Skipping calendar entry %r: missing or invalid DTSTART", summary)
            continue

        team = determine_team(summary, props.get("CATEGORIES"), default_team)
        events.append(
            CalendarEvent(
                team=team,
                opponent=determine_opponent(summary, team),
                date=utc_iso(start),
                time=local_hhmm(start, tz),
                location=props.get("LOCATION", ""),
                description=_normalize_description(props.get("DESCRIPTION")),
                ics_uid=props.get("UID") or None,
            )
        )

    return events


__all__ = [
    "AUTO_DETECT_TEAM",
    "UNKNOWN_TEAM",
    "KNOWN_TEAMS",
    "OPPONENT_SEPARATORS",
    "CalendarEvent",
    "unfold_lines",
    "parse_ics_datetime",
    "determine_team",
    "determine_opponent",
    "parse_ics",
]
