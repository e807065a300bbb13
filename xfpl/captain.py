"""Captain ranking for the next gameweek.

score = ep_next * (2.2 - 0.3 * fdr) * home_boost * (1 + 0.3 * xgi_90)
        * minutes_risk * dgw_multiplier
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from xfpl.errors import ApiError
from xfpl.lookup import POSITION_BY_TYPE

METHOD = "ep_next * (2.2-0.3*fdr) * home_boost * (1+0.3*xgi_per_90) * minutes_risk * dgw_multiplier"

_HOME_BOOST = 1.10
_AWAY_BOOST = 0.95
_DGW_STEP = 0.85


@dataclass
class Event:
    """A gameweek as listed in bootstrap-static."""

    id: int
    is_next: bool = False
    is_current: bool = False
    finished: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        return cls(
            id=int(data.get("id") or 0),
            is_next=bool(data.get("is_next")),
            is_current=bool(data.get("is_current")),
            finished=bool(data.get("finished")),
        )


@dataclass
class CaptainScore:
    """One scored captain candidate with each component of its score."""

    id: int
    name: str
    team: str
    position: str
    gw: int
    ep_next: float
    fdr_avg: float
    xgi_per_90: float
    home_boost: float
    minutes_risk: float
    dgw_multiplier: float
    captain_score: float
    fixtures: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Full breakdown of the score."""
        return {
            "id": self.id,
            "name": self.name,
            "team": self.team,
            "position": self.position,
            "gw": self.gw,
            "ep_next": self.ep_next,
            "fdr_avg": self.fdr_avg,
            "xgi_per_90": self.xgi_per_90,
            "home_boost": self.home_boost,
            "minutes_risk": self.minutes_risk,
            "dgw_multiplier": self.dgw_multiplier,
            "captain_score": self.captain_score,
            "fixtures": list(self.fixtures),
        }

    def to_slim_dict(self) -> dict[str, Any]:
        """Just the identity, score and fixtures."""
        return {
            "captain_score": self.captain_score,
            "fixtures": list(self.fixtures),
            "id": self.id,
            "name": self.name,
            "team": self.team,
        }


def captain_min_risk(minutes_season: int) -> float:
    """Minutes risk: 0.5 below 450 minutes, rising linearly to 1.0 at 1350."""
    if minutes_season >= 1350:
        return 1.0
    if minutes_season >= 450:
        return 0.5 + 0.5 * ((minutes_season - 450) / 900.0)
    return 0.5


def score_captain(
    ep_next: float,
    fdr_avg: float,
    xgi90: float,
    minutes_season: int,
    dgw_extra: int,
    all_home: bool,
) -> float:
    """Score one candidate; zero when no points are expected."""
    if ep_next <= 0:
        return 0.0
    fdr_mult = max(2.2 - 0.3 * fdr_avg, 0.3)
    home_boost = _HOME_BOOST if all_home else _AWAY_BOOST
    xgi_boost = 1.0 + 0.3 * xgi90
    dgw_mult = 1.0 + _DGW_STEP * dgw_extra
    return ep_next * fdr_mult * home_boost * xgi_boost * captain_min_risk(minutes_season) * dgw_mult


def resolve_next_gw(events: Iterable[Event | dict[str, Any]], override: int = 0) -> int:
    """Return the override, else the next gameweek, else the unfinished current one."""
    if override > 0:
        return override
    parsed = [e if isinstance(e, Event) else Event.from_dict(e) for e in events]
    for event in parsed:
        if event.is_next:
            return event.id
    for event in parsed:
        if event.is_current and not event.finished:
            return event.id
    raise ApiError("could not determine next gameweek")


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def rank_captains(
    bootstrap: dict[str, Any],
    fixtures: Iterable[dict[str, Any]],
    gw: int = 0,
    top: int = 5,
    min_minutes: int = 270,
    explain: bool = False,
) -> dict[str, Any]:
    """Rank available players as captains for a gameweek.

    Returns ``{"gw", "method", "picks"}``; picks carry the full breakdown
    when ``explain`` is set and a slim summary otherwise.
    """
    target_gw = resolve_next_gw(bootstrap.get("events") or [], gw)

    by_team: dict[int, list[tuple[int, int, bool]]] = {}
    for fixture in fixtures:
        if int(fixture.get("event") or 0) != target_gw or fixture.get("finished"):
            continue
        home = int(fixture.get("team_h") or 0)
        away = int(fixture.get("team_a") or 0)
        by_team.setdefault(home, []).append((away, int(fixture.get("team_h_difficulty") or 0), True))
        by_team.setdefault(away, []).append((home, int(fixture.get("team_a_difficulty") or 0), False))

    short_by_id = {int(t.get("id") or 0): str(t.get("short_name") or "") for t in bootstrap.get("teams") or []}

    picks: list[CaptainScore] = []
    for element in bootstrap.get("elements") or []:
        if element.get("status") != "a":
            continue
        minutes = int(element.get("minutes") or 0)
        if minutes < min_minutes:
            continue
        ep = _to_float(element.get("ep_next"))
        if ep <= 0:
            continue
        team_id = int(element.get("team") or 0)
        team_fixtures = by_team.get(team_id, [])
        if not team_fixtures:
            continue
        xgi = _to_float(element.get("expected_goal_involvements_per_90"))
        all_home = all(is_home for _, _, is_home in team_fixtures)
        fixture_strs = [
            f"{short_by_id.get(opp, '')} ({'H' if is_home else 'A'}, FDR {fdr})"
            for opp, fdr, is_home in team_fixtures
        ]
        fdr_avg = sum(fdr for _, fdr, _ in team_fixtures) / len(team_fixtures)
        dgw_extra = len(team_fixtures) - 1
        picks.append(
            CaptainScore(
                id=int(element.get("id") or 0),
                name=str(element.get("web_name") or ""),
                team=short_by_id.get(team_id, ""),
                position=POSITION_BY_TYPE.get(int(element.get("element_type") or 0), ""),
                gw=target_gw,
                ep_next=ep,
                fdr_avg=fdr_avg,
                xgi_per_90=xgi,
                home_boost=_HOME_BOOST if all_home else _AWAY_BOOST,
                minutes_risk=captain_min_risk(minutes),
                dgw_multiplier=1.0 + _DGW_STEP * dgw_extra,
                captain_score=score_captain(ep, fdr_avg, xgi, minutes, dgw_extra, all_home),
                fixtures=fixture_strs,
            )
        )

    picks.sort(key=lambda p: p.captain_score, reverse=True)
    if top > 0:
        picks = picks[:top]

    return {
        "gw": target_gw,
        "method": METHOD,
        "picks": [p.to_dict() if explain else p.to_slim_dict() for p in picks],
    }