"""Joins of several API responses: per-player points, captain history, cup status."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from xfpl.errors import ApiError


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def current_gameweek(events: Iterable[dict[str, Any]]) -> int:
    """Return the current gameweek, else the next one."""
    events = list(events)
    for event in events:
        if event.get("is_current") and _int(event.get("id")):
            return _int(event.get("id"))
    for event in events:
        if event.get("is_next") and _int(event.get("id")):
            return _int(event.get("id"))
    raise ApiError("could not determine current gameweek")


def _stats_by_id(live: Any) -> dict[int, dict[str, Any]]:
    if not isinstance(live, dict):
        return {}
    return {
        _int(element.get("id")): element.get("stats") or {}
        for element in live.get("elements") or []
        if isinstance(element, dict)
    }


def points_breakdown(
    team_id: str,
    gw: int,
    picks: dict[str, Any],
    live: dict[str, Any],
    names: Mapping[int, str],
) -> dict[str, Any]:
    """Join a manager's picks with live stats into a per-player points breakdown."""
    entry = picks.get("entry_history") or {}
    stats = _stats_by_id(live)
    breakdown: list[dict[str, Any]] = []
    for pick in picks.get("picks") or []:
        element = _int(pick.get("element"))
        s = stats.get(element, {})
        raw = _int(s.get("total_points"))
        multiplier = _int(pick.get("multiplier"))
        row: dict[str, Any] = {
            "position": _int(pick.get("position")),
            "element": element,
            "name": names.get(element, ""),
            "raw_points": raw,
            "multiplier": multiplier,
            "effective_points": raw * multiplier,
            "minutes": _int(s.get("minutes")),
            "goals": _int(s.get("goals_scored")),
            "assists": _int(s.get("assists")),
            "bonus": _int(s.get("bonus")),
        }
        if pick.get("is_captain"):
            row["is_captain"] = True
        if pick.get("is_vice_captain"):
            row["is_vice_captain"] = True
        breakdown.append(row)
    return {
        "bank": _int(entry.get("bank")) / 10.0,
        "breakdown": breakdown,
        "gw": gw,
        "gw_points": _int(entry.get("points")),
        "gw_rank": _int(entry.get("rank")),
        "team_id": team_id,
        "team_value": _int(entry.get("value")) / 10.0,
        "transfer_cost": _int(entry.get("event_transfers_cost")),
    }


def captains_history(
    team_id: str,
    history: dict[str, Any],
    picks_by_gw: Mapping[int, Any],
    live_by_gw: Mapping[int, Any],
    names: Mapping[int, str],
    limit: int = 10,
) -> dict[str, Any]:
    """List the captain of each of the most recent ``limit`` gameweeks.

    Gameweeks without picks are skipped; missing live data counts as zero points.
    """
    events = list(history.get("current") or [])
    if limit > 0:
        events = events[-limit:]
    captains: list[dict[str, Any]] = []
    for event in events:
        gw = _int(event.get("event"))
        picks = picks_by_gw.get(gw)
        if not isinstance(picks, dict):
            continue
        points = {element: _int(s.get("total_points")) for element, s in _stats_by_id(live_by_gw.get(gw)).items()}
        captain = next((p for p in picks.get("picks") or [] if p.get("is_captain")), None)
        if captain is None:
            continue
        element = _int(captain.get("element"))
        multiplier = _int(captain.get("multiplier"))
        captains.append(
            {
                "gw": gw,
                "captain_id": element,
                "captain_name": names.get(element, ""),
                "multiplier": multiplier,
                "captain_points": points.get(element, 0) * multiplier,
                "gw_points": _int(event.get("points")),
                "gw_rank": _int(event.get("rank")),
            }
        )
    return {"captains": captains, "team_id": team_id}


def cup_payload(team_id: str, status: dict[str, Any] | None, matches: dict[str, Any] | None) -> dict[str, Any]:
    """Build the cup report; no status means the manager is not in the cup."""
    payload: dict[str, Any] = {}
    if status is None:
        payload["note"] = "manager is not in the FPL Cup this season (or cup not yet started)"
        payload["status"] = "not_in_cup"
        payload["team_id"] = team_id
        return payload
    payload["cup"] = status
    if matches is not None:
        payload["matches"] = matches
    payload["team_id"] = team_id
    return payload