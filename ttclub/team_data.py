"""Team, member and season records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from ttclub.team_positions import compare_team_positions


@dataclass
class TeamMember:
    id: str
    name: str
    email: str = ""
    rating: int = 0
    play_style: Optional[str] = None
    availability: Optional[str] = None
    is_captain: bool = False
    position: Optional[str] = None


@dataclass
class TrainingSlot:
    day: str
    time: str


@dataclass
class HomeMatchInfo:
    location: str
    day: Optional[str] = None
    time: Optional[str] = None


@dataclass
class Team:
    id: str
    name: str
    league: str = ""
    division: Optional[str] = None
    training_slots: List[TrainingSlot] = field(default_factory=list)
    home_match: Optional[HomeMatchInfo] = None
    members: List[TeamMember] = field(default_factory=list)


@dataclass
class Season:
    id: str
    label: str
    start_year: int
    end_year: int
    is_current: bool = False
    is_archived: bool = False
    category: Optional[str] = None  # "erwachsene" | "jugend"


@dataclass
class SeasonDefinition:
    teams: List[Team] = field(default_factory=list)
    # team id -> member ids
    assignments: Dict[str, List[str]] = field(default_factory=dict)
    # team id -> captain member id
    captains: Dict[str, str] = field(default_factory=dict)


INITIAL_SEASONS: List[Season] = [
    Season("2025-26", "Saison 2025/26", 2025, 2026, is_current=True),
    Season("2024-25", "Saison 2024/25", 2024, 2025),
]


def _compare_members(a: TeamMember, b: TeamMember) -> int:
    result = compare_team_positions(a.position, b.position)
    if result:
        return result
    left, right = a.name.casefold(), b.name.casefold()
    return (left > right) - (left < right)


def sort_team_members(members: Iterable[TeamMember]) -> List[TeamMember]:
    """Order by lineup position, then by name."""
    return sorted(members, key=cmp_to_key(_compare_members))


def create_season_state(definition: SeasonDefinition, club_members: Iterable[TeamMember]) -> List[Team]:
    """Resolve member assignments into teams; unknown member ids are skipped."""

    by_id = {member.id: member for member in club_members}
    teams: List[Team] = []
    for team in definition.teams:
        members = [
            replace(by_id[member_id], is_captain=definition.captains.get(team.id) == member_id)
            for member_id in definition.assignments.get(team.id, [])
            if member_id in by_id
        ]
        teams.append(replace(team, members=members))
    return teams


def current_season(seasons: Iterable[Season] = INITIAL_SEASONS) -> Optional[Season]:
    for season in seasons:
        if season.is_current:
            return season
    return None


__all__ = [
    "TeamMember",
    "TrainingSlot",
    "HomeMatchInfo",
    "Team",
    "Season",
    "SeasonDefinition",
    "INITIAL_SEASONS",
    "sort_team_members",
    "create_season_state",
    "current_season",
]
