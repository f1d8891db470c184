"""Lineup positions of the form ``"<team order>.<slot>"``.

``"2.3"`` is the third player of the second team. Missing or broken values
sort after every valid position so incomplete rosters stay readable.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable, List, NamedTuple, Optional, Union

MAX_LINEUP_POSITIONS = 12
MAX_ORDER_VALUE = 2**53 - 1

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

PositionValue = Union[str, int, float, None]


class TeamPosition(NamedTuple):
    team_order: int
    slot_order: int


def build_team_position(team_order: int, slot: int) -> str:
    return f"{team_order}.{slot}"


def _parse_order(part: Optional[str]) -> int:
    if not part:
        return MAX_ORDER_VALUE
    match = _LEADING_INT_RE.match(part)
    if not match:
        return MAX_ORDER_VALUE
    return int(match.group(1))


def parse_team_position(position: Optional[str]) -> TeamPosition:
    if not position:
        return TeamPosition(MAX_ORDER_VALUE, MAX_ORDER_VALUE)

    team_part, sep, slot_part = position.partition(".")
    return TeamPosition(
        _parse_order(team_part),
        _parse_order(slot_part if sep else None),
    )


def _as_text(value: PositionValue) -> Optional[str]:
    """Stringify numbers so they parse like text; whole floats drop the ``.0``."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compare_team_positions(first: PositionValue, second: PositionValue) -> int:
    """``cmp``-style comparison: team order, then slot, then present before absent."""

    a = parse_team_position(_as_text(first))
    b = parse_team_position(_as_text(second))

    if a.team_order != b.team_order:
        return a.team_order - b.team_order
    if a.slot_order != b.slot_order:
        return a.slot_order - b.slot_order

    if first and not second:
        return -1
    if not first and second:
        return 1
    return 0


position_sort_key = cmp_to_key(compare_team_positions)


def sort_positions(positions: Iterable[PositionValue]) -> List[PositionValue]:
    return sorted(positions, key=position_sort_key)


def team_position_options(
    team_order: int,
    member_count: int,
    current: Optional[str] = None,
) -> List[str]:
    """Positions selectable for a roster of ``member_count`` players.

    The member's current position is kept in the list even when it lies
    outside the generated range.
    """

    options = [build_team_position(team_order, slot) for slot in range(1, member_count + 1)]
    if current and current not in options:
        options.append(current)
    return sorted(options, key=position_sort_key)


__all__ = [
    "MAX_LINEUP_POSITIONS",
    "MAX_ORDER_VALUE",
    "TeamPosition",
    "build_team_position",
    "parse_team_position",
    "compare_team_positions",
    "position_sort_key",
    "sort_positions",
    "team_position_options",
]
