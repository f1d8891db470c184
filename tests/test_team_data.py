from ttclub.team_data import (
    INITIAL_SEASONS,
    Season,
    SeasonDefinition,
    Team,
    TeamMember,
    create_season_state,
    current_season,
    sort_team_members,
)


def _member(member_id, name, position=None):
    return TeamMember(id=member_id, name=name, position=position)


def test_sort_team_members_by_position_then_name():
    members = [
        _member("m1", "Zoe", None),
        _member("m2", "bernd", "1.2"),
        _member("m3", "Anna", "1.1"),
        _member("m4", "Carl", None),
        _member("m5", "Dora", "2"),
    ]

    ordered = [m.id for m in sort_team_members(members)]

    assert ordered == ["m3", "m2", "m5", "m4", "m1"]


def test_create_season_state_resolves_assignments():
    club = [_member("m1", "Anna"), _member("m2", "Bernd"), _member("m3", "Carl")]
    definition = SeasonDefinition(
        teams=[Team(id="t1", name="Herren I"), Team(id="t2", name="Herren II")],
        assignments={"t1": ["m1", "m2", "ghost"], "t2": ["m3"]},
        captains={"t1": "m2"},
    )

    teams = create_season_state(definition, club)

    assert [m.id for m in teams[0].members] == ["m1", "m2"]
    assert [m.is_captain for m in teams[0].members] == [False, True]
    assert [m.id for m in teams[1].members] == ["m3"]
    # source records stay untouched
    assert definition.teams[0].members == []
    assert club[1].is_captain is False


def test_current_season():
    assert current_season().id == "2025-26"
    assert current_season([Season("x", "X", 2020, 2021)]) is None
    assert len(INITIAL_SEASONS) == 2


def test_numeric_positions_from_backend_sort():
    members = [_member("m1", "Anna", 2.1), _member("m2", "Bernd", "1.3"), _member("m3", "Carl", 1)]

    assert [m.id for m in sort_team_members(members)] == ["m2", "m3", "m1"]
