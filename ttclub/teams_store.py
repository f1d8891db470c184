# file: ttclub/teams_store.py
"""Team rosters backed by Supabase."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
import threading

import httpx
from postgrest.exceptions import APIError

from ttclub.db_tables import PROFILES, TEAM_MEMBERS, TEAMS
from ttclub.error_handling import handle_error
from ttclub.supabase_client import get_client
from ttclub.team_data import HomeMatchInfo, Team, TeamMember, TrainingSlot, sort_team_members

_LOCK = threading.Lock()
_BACKEND_ERRORS = (APIError, httpx.HTTPError)


def list_team_names() -> List[str]:
    """Return all team names ordered by name."""
    client = get_client()
    try:
        res = client.table(TEAMS).select("name").order("name").execute()
    except _BACKEND_ERRORS as err:
        handle_error(
            err,
            toast_title="Fehler beim Laden der Mannschaften",
            custom_message="Die Mannschaften konnten nicht geladen werden.",
        )
        return []
    return [row["name"] for row in (res.data or []) if row.get("name")]


def _display_name(profile: Dict[str, Any]) -> str:
    full = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    return full or profile.get("email") or "Unbekannt"


def _training_slots(raw: Any) -> List[TrainingSlot]:
    if not isinstance(raw, list):
        return []
    return [
        TrainingSlot(day=str(slot.get("day") or ""), time=str(slot.get("time") or ""))
        for slot in raw
        if isinstance(slot, dict)
    ]


def _home_match(raw: Any) -> Optional[HomeMatchInfo]:
    if not isinstance(raw, dict):
        return None
    if not (raw.get("location") or raw.get("day") or raw.get("time")):
        return None
    return HomeMatchInfo(
        location=raw.get("location") or "",
        day=raw.get("day") or None,
        time=raw.get("time") or None,
    )


def build_teams(
    team_rows: List[Dict[str, Any]],
    member_rows: List[Dict[str, Any]],
    profile_rows: List[Dict[str, Any]],
) -> List[Team]:
    """Join raw rows into teams with position-sorted members, teams sorted by name."""

    profiles = {row.get("user_id"): row for row in profile_rows}
    teams: List[Team] = []
    for row in team_rows:
        members = []
        for link in member_rows:
            if link.get("team_id") != row.get("id"):
                continue
            member_id = link.get("member_id")
            profile = profiles.get(member_id) or {}
            members.append(
                TeamMember(
                    id=member_id,
                    name=_display_name(profile) if profile else str(member_id),
                    email=profile.get("email") or "",
                    rating=profile.get("qttr_value") or 0,
                    is_captain=bool(link.get("is_captain")),
                    position=link.get("position") or None,
                )
            )
        teams.append(
            Team(
                id=row["id"],
                name=row.get("name") or "",
                league=row.get("league") or "",
                division=row.get("division") or None,
                training_slots=_training_slots(row.get("training_slots")),
                home_match=_home_match(row.get("home_match")),
                members=sort_team_members(members),
            )
        )
    return sorted(teams, key=lambda team: team.name.casefold())


def load_teams_for_season(season_id: str) -> List[Team]:
    """Load the teams of ``season_id`` including their rosters."""
    client = get_client()
    try:
        teams = client.table(TEAMS).select("*").eq("season_id", season_id).execute()
        team_ids = [row["id"] for row in (teams.data or [])]
        members = (
            client.table(TEAM_MEMBERS).select("*").in_("team_id", team_ids).execute()
            if team_ids
            else None
        )
        profiles = (
            client.table(PROFILES)
            .select("user_id, first_name, last_name, email, qttr_value")
            .execute()
        )
    except _BACKEND_ERRORS as err:
        handle_error(err, custom_message="Teams konnten nicht geladen werden.")
        return []

    return build_teams(
        list(teams.data or []),
        list(members.data or []) if members is not None else [],
        list(profiles.data or []),
    )


def update_member_position(team_id: str, member_id: str, position: Optional[str]) -> bool:
    """Store a member's lineup position (``None`` clears it)."""
    client = get_client()
    with _LOCK:
        try:
            (
                client.table(TEAM_MEMBERS)
                .update({"position": position})
                .eq("team_id", team_id)
                .eq("member_id", member_id)
                .execute()
            )
        except _BACKEND_ERRORS as err:
            handle_error(err, custom_message="Die Position konnte nicht gespeichert werden.")
            return False
    return True


__all__ = ["list_team_names", "build_teams", "load_teams_for_season", "update_member_position"]
