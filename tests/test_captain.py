import pytest

from xfpl.captain import (
    METHOD,
    Event,
    captain_min_risk,
    rank_captains,
    resolve_next_gw,
    score_captain,
)
from xfpl.errors import ApiError


def test_fdr_monotonic():
    easy = score_captain(7.0, 2.0, 0.5, 2000, 0, True)
    hard = score_captain(7.0, 5.0, 0.5, 2000, 0, True)
    assert easy > hard


def test_home_boost():
    home = score_captain(7.0, 3.0, 0.5, 2000, 0, True)
    away = score_captain(7.0, 3.0, 0.5, 2000, 0, False)
    assert home > away


def test_xgi_boost():
    with_xg = score_captain(7.0, 3.0, 1.0, 2000, 0, True)
    no_xg = score_captain(7.0, 3.0, 0.0, 2000, 0, True)
    assert with_xg > no_xg


def test_minutes_risk():
    regular = score_captain(7.0, 3.0, 0.5, 2000, 0, True)
    rotation = score_captain(7.0, 3.0, 0.5, 400, 0, True)
    assert regular > rotation
    assert captain_min_risk(2000) == pytest.approx(1.0, abs=0.01)
    assert captain_min_risk(100) == pytest.approx(0.5, abs=0.01)


def test_min_risk_is_monotonic_and_bounded():
    values = [captain_min_risk(m) for m in range(0, 2000, 50)]
    assert values == sorted(values)
    assert min(values) == 0.5
    assert max(values) == 1.0


def test_dgw():
    single = score_captain(7.0, 3.0, 0.5, 2000, 0, True)
    dgw = score_captain(7.0, 3.0, 0.5, 2000, 1, True)
    assert dgw > single * 1.5


def test_zero_ep():
    assert score_captain(0, 3.0, 0.5, 2000, 0, True) == 0


def test_fdr_multiplier_floor():
    # Beyond the floor, harder fixtures no longer lower the score.
    assert score_captain(7.0, 10.0, 0.0, 2000, 0, True) == score_captain(7.0, 20.0, 0.0, 2000, 0, True)


def test_resolve_next_gw():
    events = [
        Event(id=36, finished=True),
        Event(id=37, is_current=True, finished=False),
        Event(id=38, is_next=True),
    ]
    assert resolve_next_gw(events, 0) == 38
    assert resolve_next_gw(events, 30) == 30
    with pytest.raises(ApiError):
        resolve_next_gw([], 0)


def test_resolve_next_gw_falls_back_to_unfinished_current():
    events = [{"id": 37, "is_current": True, "finished": False}]
    assert resolve_next_gw(events) == 37


def test_resolve_next_gw_finished_current_is_error():
    with pytest.raises(ApiError, match="could not determine next gameweek"):
        resolve_next_gw([{"id": 38, "is_current": True, "finished": True}])


@pytest.fixture
def bootstrap():
    return {
        "events": [
            {"id": 9, "is_current": True, "finished": True},
            {"id": 10, "is_next": True},
        ],
        "teams": [
            {"id": 1, "short_name": "ARS"},
            {"id": 2, "short_name": "CHE"},
            {"id": 3, "short_name": "LIV"},
            {"id": 4, "short_name": "MCI"},
        ],
        "elements": [
            {"id": 1, "web_name": "Home", "team": 1, "element_type": 3, "status": "a",
             "minutes": 2000, "ep_next": "6.0", "expected_goal_involvements_per_90": 0.5},
            {"id": 2, "web_name": "Away", "team": 2, "element_type": 4, "status": "a",
             "minutes": 2000, "ep_next": "6.0", "expected_goal_involvements_per_90": 0.5},
            {"id": 3, "web_name": "Double", "team": 3, "element_type": 3, "status": "a",
             "minutes": 2000, "ep_next": "6.0", "expected_goal_involvements_per_90": 0.5},
            {"id": 4, "web_name": "Injured", "team": 1, "element_type": 3, "status": "i",
             "minutes": 2000, "ep_next": "9.0", "expected_goal_involvements_per_90": 1.0},
            {"id": 5, "web_name": "Bench", "team": 1, "element_type": 2, "status": "a",
             "minutes": 100, "ep_next": "9.0", "expected_goal_involvements_per_90": 1.0},
            {"id": 6, "web_name": "Zero", "team": 1, "element_type": 2, "status": "a",
             "minutes": 2000, "ep_next": "0.0", "expected_goal_involvements_per_90": 1.0},
            {"id": 7, "web_name": "Blank", "team": 5, "element_type": 1, "status": "a",
             "minutes": 2000, "ep_next": "5.0", "expected_goal_involvements_per_90": 0.0},
        ],
    }


@pytest.fixture
def fixtures():
    return [
        {"event": 10, "team_h": 1, "team_a": 2, "team_h_difficulty": 2,
         "team_a_difficulty": 4, "finished": False},
        {"event": 10, "team_h": 3, "team_a": 4, "team_h_difficulty": 3,
         "team_a_difficulty": 3, "finished": False},
        {"event": 10, "team_h": 4, "team_a": 3, "team_h_difficulty": 3,
         "team_a_difficulty": 3, "finished": False},
        {"event": 9, "team_h": 5, "team_a": 1, "team_h_difficulty": 2,
         "team_a_difficulty": 2, "finished": True},
    ]


def test_rank_filters_and_orders(bootstrap, fixtures):
    payload = rank_captains(bootstrap, fixtures, top=0)
    assert payload["gw"] == 10
    assert payload["method"] == METHOD
    ids = [p["id"] for p in payload["picks"]]
    assert sorted(ids) == [1, 2, 3]
    scores = [p["captain_score"] for p in payload["picks"]]
    assert scores == sorted(scores, reverse=True)
    assert ids[0] == 3  # the double gameweek outranks single fixtures


def test_rank_slim_picks_have_fixture_strings(bootstrap, fixtures):
    picks = {p["id"]: p for p in rank_captains(bootstrap, fixtures, top=0)["picks"]}
    assert set(picks[1]) == {"id", "name", "team", "captain_score", "fixtures"}
    assert picks[1]["fixtures"] == ["CHE (H, FDR 2)"]
    assert picks[2]["fixtures"] == ["ARS (A, FDR 4)"]
    assert len(picks[3]["fixtures"]) == 2


def test_rank_scores_match_formula(bootstrap, fixtures):
    picks = {p["id"]: p for p in rank_captains(bootstrap, fixtures, top=0)["picks"]}
    assert picks[1]["captain_score"] == pytest.approx(score_captain(6.0, 2.0, 0.5, 2000, 0, True))
    assert picks[2]["captain_score"] == pytest.approx(score_captain(6.0, 4.0, 0.5, 2000, 0, False))
    assert picks[3]["captain_score"] == pytest.approx(score_captain(6.0, 3.0, 0.5, 2000, 1, False))


def test_rank_explain_breakdown(bootstrap, fixtures):
    picks = {p["id"]: p for p in rank_captains(bootstrap, fixtures, top=0, explain=True)["picks"]}
    assert picks[1]["home_boost"] == 1.10
    assert picks[2]["home_boost"] == 0.95
    assert picks[3]["home_boost"] == 0.95
    assert picks[1]["dgw_multiplier"] == 1.0
    assert picks[3]["dgw_multiplier"] > 1.0
    assert picks[1]["position"] == "MID"
    assert picks[2]["position"] == "FWD"
    assert picks[1]["minutes_risk"] == 1.0
    assert picks[1]["gw"] == 10


def test_rank_top_limits(bootstrap, fixtures):
    assert len(rank_captains(bootstrap, fixtures, top=2)["picks"]) == 2


def test_rank_min_minutes_and_gw_override(bootstrap, fixtures):
    payload = rank_captains(bootstrap, fixtures, min_minutes=0, top=0)
    assert 5 in [p["id"] for p in payload["picks"]]
    assert rank_captains(bootstrap, fixtures, gw=9, top=0)["picks"] == []