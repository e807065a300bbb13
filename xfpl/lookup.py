"""Name-based player lookup and side-by-side comparison over bootstrap data."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable

from xfpl.errors import NotFoundError, UsageError

POSITION_BY_TYPE = {1: "GK", 2: "DEF", 3: "MID", 4: "FWD"}


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@dataclass
class PlayerView:
    """A compact, display-ready summary of one player."""

    id: int
    name: str
    team: str
    position: str
    now_cost: float
    form: str
    total_points: int
    selected_by_percent: str
    status: str
    news: str
    ep_next: str

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape of the view; empty news is left out."""
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "team": self.team,
            "position": self.position,
            "now_cost": self.now_cost,
            "form": self.form,
            "total_points": self.total_points,
            "selected_by_percent": self.selected_by_percent,
            "status": self.status,
        }
        if self.news:
            out["news"] = self.news
        out["ep_next"] = self.ep_next
        return out


def resolve_player_by_name(bootstrap: dict[str, Any], query: str) -> dict[str, Any]:
    """Find the single element matching ``query``.

    An exact web name or full name wins at once; otherwise the query must
    be a substring of exactly one player's web, first or second name.
    """
    q = query.strip().lower()
    if not q:
        raise UsageError("player name required")
    matches: list[dict[str, Any]] = []
    for element in bootstrap.get("elements") or []:
        first_raw = str(element.get("first_name") or "")
        second_raw = str(element.get("second_name") or "")
        web = str(element.get("web_name") or "").lower()
        first = first_raw.lower()
        second = second_raw.lower()
        full = f"{first_raw} {second_raw}".lower()
        if q in (web, full):
            return element
        if q in web or q in second or q in first:
            matches.append(element)
    if not matches:
        raise NotFoundError(f"no player matched {_quote(query)}")
    if len(matches) == 1:
        return matches[0]
    names = ", ".join(f"{m.get('web_name', '')} (id={m.get('id', 0)})" for m in matches)
    raise UsageError(
        f"ambiguous player {_quote(query)} matched {len(matches)} players: {names}"
        " — use --id or refine the name"
    )


def team_short(bootstrap: dict[str, Any], team_id: int) -> str:
    """Return a team's short name, or ``T<id>`` when the team is unknown."""
    for team in bootstrap.get("teams") or []:
        if team.get("id") == team_id:
            return str(team.get("short_name") or "")
    return f"T{team_id}"


def view_of(bootstrap: dict[str, Any], element: dict[str, Any]) -> PlayerView:
    """Build the display view of one element, resolving team and position."""
    return PlayerView(
        id=int(element.get("id") or 0),
        name=str(element.get("web_name") or ""),
        team=team_short(bootstrap, int(element.get("team") or 0)),
        position=POSITION_BY_TYPE.get(int(element.get("element_type") or 0), ""),
        now_cost=int(element.get("now_cost") or 0) / 10.0,
        form=str(element.get("form") or ""),
        total_points=int(element.get("total_points") or 0),
        selected_by_percent=str(element.get("selected_by_percent") or ""),
        status=str(element.get("status") or ""),
        news=str(element.get("news") or ""),
        ep_next=str(element.get("ep_next") or ""),
    )


def compare_players(bootstrap: dict[str, Any], names: Iterable[str]) -> list[PlayerView]:
    """Resolve two or more names and return their views in the given order."""
    names = list(names)
    if len(names) < 2:
        raise UsageError(f"requires at least 2 arg(s), only received {len(names)}")
    return [view_of(bootstrap, resolve_player_by_name(bootstrap, name)) for name in names]