# xfpl

A small Python library for fantasy football managers. It ranks captain
picks for a gameweek, looks players up by name, joins a team's picks with
live stats into a points breakdown, and shapes JSON responses for scripts
and agents.

It has no runtime dependencies beyond the standard library and supports
Python 3.10 and later.

```
pip install .
```

## What it does not do

The package works on API payloads that you have already fetched and decoded
(the bootstrap data, fixtures, picks, live stats and so on). It does not
make network requests itself, and it ships no command-line program: there
is no `xfpl` command to run. Output is returned as Python values and
strings; writing it to files or posting it elsewhere is up to the caller.

## Captain ranking — `xfpl.captain`

`score_captain(ep_next, fdr_avg, xgi90, minutes_season, dgw_extra, all_home)`
scores one candidate, and returns 0 when `ep_next` is not positive:

```
score = ep_next
      * (2.2 - 0.3 * fdr)     # floored at 0.3
      * home_boost            # 1.10 if every fixture is at home, else 0.95
      * (1 + 0.3 * xgi_per_90)
      * minutes_risk          # captain_min_risk: 0.5 below 450 minutes,
                              # linear up to 1.0 at 1350
      * dgw_multiplier        # 1 + 0.85 per extra fixture
```

`resolve_next_gw(events, override)` returns the override if positive,
otherwise the gameweek marked next, otherwise the unfinished current one,
and raises `ApiError` when none fits. `events` may be `Event` objects or
dicts.

`rank_captains(bootstrap, fixtures, gw=0, top=5, min_minutes=270, explain=False)`
scores every available player (status `"a"`) with enough minutes and a
fixture in the target gameweek, and returns
`{"gw": ..., "method": ..., "picks": [...]}`. Picks are sorted by score;
with `explain` each carries the full `CaptainScore` breakdown, otherwise
only id, name, team, score and fixtures.

```python
from xfpl.captain import score_captain

score_captain(7.0, 2.0, 0.5, 2000, 0, True)
```

## Player lookup — `xfpl.lookup`

`resolve_player_by_name(bootstrap, query)` matches case-insensitively: an
exact web name or full name wins at once; otherwise the query must be a
substring of exactly one player's web, first or second name. No match
raises `NotFoundError`; several matches raise `UsageError` listing them.

`view_of(bootstrap, element)` builds a `PlayerView` (cost in millions,
team short name via `team_short`, position from the element type);
`PlayerView.to_dict()` gives its JSON shape. `compare_players(bootstrap, names)`
resolves two or more names and returns their views in order.

## Gameweek joins — `xfpl.extras`

- `current_gameweek(events)` — the current gameweek, else the next one.
- `points_breakdown(team_id, gw, picks, live, names)` — per-player raw and
  effective points, minutes, goals, assists and bonus, plus the team's
  gameweek points, rank, transfer cost, value and bank.
- `captains_history(team_id, history, picks_by_gw, live_by_gw, names, limit=10)`
  — the captain and captain points for each of the last `limit` gameweeks.
- `cup_payload(team_id, status, matches)` — cup status, or a
  `"not_in_cup"` report when `status` is `None`.

## Output shaping

`xfpl.selection`:

- `filter_fields(data, "name,stats.points")` keeps the selected fields,
  case-insensitively, descending through nested objects and arrays.
- `compact_fields(data)` trims list rows to identifying fields and drops
  verbose metadata from single objects.
- `extract_response_data(data)` unwraps `{"status": "success", "data": ...}`.
- `wrap_with_provenance(text, prov)` returns a `{"meta": ..., "results": ...}`
  JSON envelope built from a `DataProvenance`.

`xfpl.render` turns lists of records into text: `render_table`,
`render_cards`, `render_auto` (which picks between them) and `render_csv`,
with helpers such as `format_cell_value`, `prioritize_fields`, `paint` and
`color_enabled`.

## Paging and sync helpers — `xfpl.paging`

`paginated_get(fetch, path, params, ...)` calls your `fetch(path, params)`
once, or follows a cursor or has-more flag across pages and concatenates
the items. Also here: `parse_sync_user_params` and `SyncUserParams`,
`looks_like_access_denial`, `sync_access_warning`, `sync_error_json`,
`detect_partial_failure`, `replace_path_param`, `levenshtein_distance` and
`suggest_flag`.

## Errors — `xfpl.errors`

Errors derive from `CliError` and carry an exit code: `UsageError` (2),
`NotFoundError` (3), `AuthError` (4), `ApiError` (5),
`PartialFailureError` (6), `RateLimitError` (7) and `ConfigError` (10);
`exit_code(err)` reads it. `HttpError` describes a non-2xx response, and
`classify_api_error(err, idempotent)` maps one onto the matching
`CliError` with a hint.

## Cache — `xfpl.cache`

`Store(dir, ttl)` is a file-based cache: `get(key)` returns the stored
bytes or `None` when missing or older than `ttl`, `set(key, value)` writes
best-effort, and `clear()` removes the directory.

## Running the tests

```
pip install ".[test]"
pytest
```