"""Sync parameters, access-denial detection, pagination and flag suggestions."""

from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable
from urllib.parse import quote

from xfpl.errors import HttpError, UsageError

_PAGINATED_ITEM_KEYS = ("data", "items", "results", "messages", "members", "values")
_PARTIAL_FAILURE_FIELDS = ("partialFailureError",)

# Access-policy rejections. Word boundaries keep "author", "pagination_token"
# and "insufficient_funds" from matching.
_ACCESS_DENIAL_PATTERNS = tuple(
    re.compile(pattern, re.ASCII)
    for pattern in (
        r"\bforbidden\b",
        r"\bunauthorized\b",
        r"\bnot[\s_-]?authorized\b",
        r"\bpermission[\s_-]?denied\b",
        r"\baccess[\s_-]?denied\b",
        r"\binsufficient[\s_-]?(scope|permission|privilege)",
        r"\binvalid[\s_-]?scope\b",
        r"\bmissing[\s_-]?scope\b",
        r"\brequires?\s+(elevated|admin|enterprise|business|workspace|enterprise[\s_-]?tier)",
    )
)

# Characters a path segment may keep unescaped besides the unreserved set.
_PATH_SEGMENT_SAFE = "$&+:=@"


def _quoted(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _emit(event: dict[str, Any]) -> None:
    sys.stderr.write(_compact_json(event) + "\n")


@dataclass
class AccessWarning:
    """An access denial that a sync reports as a warning instead of failing."""

    status: int
    reason: str
    message: str


@dataclass
class PartialFailureReport:
    """A 2xx batch response in which some operations failed."""

    field: str
    message: str = ""
    code: int = 0
    details: Any = None
    resource_names: list[str] = field(default_factory=list)


@dataclass
class SyncUserParams:
    """User query parameters injected into sync requests.

    ``flat_global`` applies to flat-list requests only, ``true_global`` to
    every request, and ``per_resource`` wins over both.
    """

    flat_global: dict[str, str] = field(default_factory=dict)
    true_global: dict[str, str] = field(default_factory=dict)
    per_resource: dict[str, dict[str, str]] = field(default_factory=dict)

    def apply_to(self, resource: str, params: dict[str, str], is_dependent: bool = False) -> dict[str, str]:
        """Merge the user parameters into ``params`` in place and return it."""
        if not is_dependent:
            params.update(self.flat_global)
        params.update(self.true_global)
        params.update(self.per_resource.get(resource, {}))
        return params

    def validate_resource_names(self, known: Iterable[str]) -> None:
        """Raise UsageError when a per-resource parameter names an unknown resource."""
        known = list(known)
        if not self.per_resource:
            return
        known_set = set(known)
        unknown = sorted(name for name in self.per_resource if name not in known_set)
        if unknown:
            raise UsageError(
                f"--resource-param references unknown resource(s): {', '.join(unknown)} "
                f"(known: {', '.join(known)})"
            )


def parse_kv_flags(flags: Iterable[str], flag_name: str) -> dict[str, str]:
    """Parse ``key=value`` tokens; the flag name appears in any error."""
    out: dict[str, str] = {}
    for token in flags:
        key, sep, value = token.partition("=")
        if not sep or not key:
            raise UsageError(f"invalid {flag_name} {_quoted(token)}: expected key=value")
        out[key] = value
    return out


def parse_sync_user_params(
    flat_global: Iterable[str],
    resource_params: Iterable[str],
    true_global: Iterable[str],
) -> SyncUserParams:
    """Parse the --param, --resource-param and --global-param flag values."""
    params = SyncUserParams(
        flat_global=parse_kv_flags(flat_global, "--param"),
        true_global=parse_kv_flags(true_global, "--global-param"),
    )
    for spec in resource_params:
        resource, sep, pair = spec.partition(":")
        if not sep or not resource:
            raise UsageError(f"invalid --resource-param {_quoted(spec)}: expected resource:key=value")
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise UsageError(f"invalid --resource-param {_quoted(spec)}: expected resource:key=value")
        params.per_resource.setdefault(resource, {})[key] = value
    return params


def looks_like_access_denial(body: str) -> bool:
    """Whether a response body describes an access-policy rejection."""
    lower = body.lower()
    return any(pattern.search(lower) for pattern in _ACCESS_DENIAL_PATTERNS)


def _find_http_error(err: BaseException | None) -> HttpError | None:
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, HttpError):
            return err
        seen.add(id(err))
        err = err.__cause__ or err.__context__
    return None


def sync_access_warning(err: BaseException | None) -> AccessWarning | None:
    """Classify an error as an access-denial warning, or None for a hard failure."""
    http_error = _find_http_error(err)
    if http_error is None:
        return None
    if http_error.status_code == 403:
        return AccessWarning(403, "forbidden", http_error.body)
    if http_error.status_code == 400 and looks_like_access_denial(http_error.body):
        return AccessWarning(400, "insufficient_access", http_error.body)
    return None


def sync_error_json(resource: str, parent: str, err: BaseException) -> str:
    """Return a one-line ``sync_error`` JSON event for a failed sync request."""
    payload: dict[str, Any] = {"event": "sync_error", "resource": resource}
    if parent:
        payload["parent"] = parent
    http_error = _find_http_error(err)
    if http_error is not None:
        if http_error.status_code:
            payload["status"] = http_error.status_code
        if http_error.method:
            payload["method"] = http_error.method
        if http_error.path:
            payload["path"] = http_error.path
        if http_error.body:
            payload["body"] = http_error.body
    payload["error"] = str(err)
    return _compact_json(payload)


def detect_partial_failure(data: Any) -> PartialFailureReport | None:
    """Find a partial-failure field in a mutate response, or return None."""
    if isinstance(data, (bytes, str)):
        if not data:
            return None
        try:
            data = json.loads(data)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None
    for name in _PARTIAL_FAILURE_FIELDS:
        obj = data.get(name)
        if not isinstance(obj, dict):
            continue
        message = obj.get("message")
        message = message if isinstance(message, str) else ""
        raw_code = obj.get("code")
        code = int(raw_code) if isinstance(raw_code, (int, float)) and not isinstance(raw_code, bool) else 0
        # An empty object means partial-failure mode was off or nothing failed.
        if code == 0 and not message.strip():
            continue
        report = PartialFailureReport(field=name, message=message, code=code, details=obj.get("details"))
        results = data.get("results")
        if isinstance(results, list):
            report.resource_names = [
                r["resourceName"]
                for r in results
                if isinstance(r, dict) and isinstance(r.get("resourceName"), str) and r["resourceName"]
            ]
        return report
    return None


def _is_array_like(value: Any) -> bool:
    # JSON null decodes into an empty list as well.
    return value is None or isinstance(value, list)


def extract_paginated_items(obj: dict[str, Any]) -> list[Any] | None:
    """Find the item array in a response object, or None when there is none."""
    for key in _PAGINATED_ITEM_KEYS:
        if key in obj and _is_array_like(obj[key]):
            return list(obj[key] or [])
    arrays = [value for value in obj.values() if _is_array_like(value)]
    if len(arrays) == 1:
        return list(arrays[0] or [])
    return None


def raw_at_path(obj: dict[str, Any], path: str) -> Any:
    """Return the value at a key or dotted path; raise KeyError when absent."""
    if path in obj:
        return obj[path]
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            raise KeyError(path)
        current = current[part]
    return current


def _lookup(obj: dict[str, Any], path: str) -> Any:
    try:
        return raw_at_path(obj, path)
    except KeyError:
        return None


def _emit_truncation_warning(data: Any, next_cursor_path: str, has_more_field: str) -> None:
    if not next_cursor_path and not has_more_field:
        return
    if not isinstance(data, dict):
        return
    next_cursor = _lookup(data, next_cursor_path) if next_cursor_path else None
    has_more = _lookup(data, has_more_field) is True if has_more_field else False
    cursor_present = isinstance(next_cursor, str) and next_cursor != ""
    if not cursor_present and not has_more:
        return
    if cursor_present:
        _emit({"event": "truncated", "hint": "pass --all to fetch every page"})
    else:
        _emit({"event": "truncated"})


def paginated_get(
    fetch: Callable[[str, dict[str, str]], Any],
    path: str,
    params: dict[str, str],
    fetch_all: bool = False,
    cursor_param: str = "",
    next_cursor_path: str = "",
    has_more_field: str = "",
) -> Any:
    """Fetch one page, or every page when ``fetch_all`` is set.

    ``fetch(path, params)`` returns the decoded JSON of one page. Empty
    parameters are dropped, as are "0" and "false" except on the cursor.
    With ``fetch_all`` the items of every page are concatenated into a list.
    """
    clean = {
        key: value
        for key, value in params.items()
        if value != "" and (key == cursor_param or value not in ("0", "false"))
    }

    if not fetch_all:
        data = fetch(path, dict(clean))
        _emit_truncation_warning(data, next_cursor_path, has_more_field)
        return data

    all_items: list[Any] = []
    page = 0
    while True:
        page += 1
        _emit({"event": "page_fetch", "page": page})
        data = fetch(path, dict(clean))
        if data is None or isinstance(data, list):
            all_items.extend(data or [])
            break
        if isinstance(data, dict):
            nested = extract_paginated_items(data)
            if nested is not None:
                all_items.extend(nested)
            if next_cursor_path:
                token = _lookup(data, next_cursor_path)
                if isinstance(token, str) and token:
                    clean[cursor_param] = token
                    continue
            if has_more_field and _lookup(data, has_more_field) is True:
                continue
        break

    _emit({"event": "complete", "total": len(all_items), "pages": page})
    return all_items


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(current[j - 1] + 1, previous[j] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def suggest_flag(unknown: str, names: Iterable[str]) -> str:
    """Return the known flag name closest to ``unknown``, or "" if none is close."""
    unknown = unknown.lstrip("-")
    best = ""
    best_distance = 4
    for name in names:
        distance = levenshtein_distance(unknown, name)
        if distance < best_distance and distance * 5 <= len(unknown) * 2:
            best_distance = distance
            best = name
    return best


def replace_path_param(path: str, name: str, value: str) -> str:
    """Substitute ``{name}`` in a path with ``value`` escaped as one segment."""
    return path.replace("{" + name + "}", quote(value, safe=_PATH_SEGMENT_SAFE))