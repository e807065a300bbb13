import pytest

from xfpl.errors import NotFoundError, UsageError
from xfpl.lookup import (
    POSITION_BY_TYPE,
    PlayerView,
    compare_players,
    resolve_player_by_name,
    team_short,
    view_of,
)


@pytest.fixture
def bootstrap():
    return {
        "teams": [
            {"id": 1, "name": "Arsenal", "short_name": "ARS"},
            {"id": 13, "name": "Man City", "short_name": "MCI"},
        ],
        "elements": [
            {
                "id": 7, "web_name": "Saka", "first_name": "Bukayo", "second_name": "Saka",
                "team": 1, "element_type": 3, "now_cost": 100, "form": "6.0",
                "total_points": 180, "selected_by_percent": "40.1", "status": "a",
                "news": "", "ep_next": "6.5", "minutes": 2500,
            },
            {
                "id": 8, "web_name": "Haaland", "first_name": "Erling", "second_name": "Haaland",
                "team": 13, "element_type": 4, "now_cost": 145, "form": "8.0",
                "total_points": 200, "selected_by_percent": "60.2", "status": "d",
                "news": "Knock", "ep_next": "7.1", "minutes": 2400,
            },
            {
                "id": 9, "web_name": "Smith Rowe", "first_name": "Emile", "second_name": "Smith Rowe",
                "team": 1, "element_type": 3, "now_cost": 55, "form": "1.0",
                "total_points": 20, "selected_by_percent": "0.5", "status": "a",
                "news": "", "ep_next": "1.0", "minutes": 300,
            },
            {
                "id": 10, "web_name": "Smith", "first_name": "Adam", "second_name": "Smith",
                "team": 99, "element_type": 2, "now_cost": 45, "form": "2.0",
                "total_points": 30, "selected_by_percent": "1.0", "status": "a",
                "news": "", "ep_next": "2.0", "minutes": 900,
            },
        ],
    }


def test_exact_web_name_case_insensitive(bootstrap):
    assert resolve_player_by_name(bootstrap, "  HAALAND ")["id"] == 8


def test_full_name_match(bootstrap):
    assert resolve_player_by_name(bootstrap, "bukayo saka")["id"] == 7


def test_unique_substring_match(bootstrap):
    assert resolve_player_by_name(bootstrap, "erl")["id"] == 8


def test_exact_match_wins_over_earlier_substring(bootstrap):
    # "smith" is a substring of Smith Rowe (earlier) but exactly Smith's web name.
    assert resolve_player_by_name(bootstrap, "Smith")["id"] == 10


def test_empty_query_is_usage_error(bootstrap):
    with pytest.raises(UsageError, match="player name required"):
        resolve_player_by_name(bootstrap, "   ")


def test_no_match_is_not_found(bootstrap):
    with pytest.raises(NotFoundError, match="no player matched"):
        resolve_player_by_name(bootstrap, "zzzz")


def test_team_short_known_and_fallback(bootstrap):
    assert team_short(bootstrap, 13) == "MCI"
    assert team_short(bootstrap, 99) == "T99"


def test_view_of_resolves_fields(bootstrap):
    element = resolve_player_by_name(bootstrap, "haaland")
    view = view_of(bootstrap, element)
    assert view.team == "MCI"
    assert view.position == POSITION_BY_TYPE[4]
    assert view.now_cost == pytest.approx(14.5)
    assert view.news == "Knock"
    assert view.to_dict()["news"] == "Knock"


def test_view_to_dict_omits_empty_news(bootstrap):
    view = view_of(bootstrap, resolve_player_by_name(bootstrap, "saka"))
    data = view.to_dict()
    assert "news" not in data
    assert data["name"] == "Saka"
    assert data["ep_next"] == "6.5"


def test_compare_players_keeps_order(bootstrap):
    views = compare_players(bootstrap, ["haaland", "saka"])
    assert [v.id for v in views] == [8, 7]
    assert all(isinstance(v, PlayerView) for v in views)


def test_compare_requires_two_names(bootstrap):
    with pytest.raises(UsageError):
        compare_players(bootstrap, ["haaland"])


def test_compare_propagates_lookup_errors(bootstrap):
    with pytest.raises(NotFoundError):
        compare_players(bootstrap, ["haaland", "nobody-here"])