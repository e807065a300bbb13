"""Field selection, compaction and provenance envelopes for JSON output."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

_LIST_WRAPPER_KEYS = frozenset({"results", "data", "items", "nodes", "entries", "records"})

_SUCCESS_STATUSES = frozenset({"success", "ok", "OK", "Success"})

# Prose-shaped fields dropped from list rows; a row is identified by id/name/etc.
_VERBOSE_LIST_FIELDS = frozenset(
    {"description", "body", "content", "comments", "attachments", "html", "markdown"}
)

# Metadata dropped from single objects. Body-like fields stay: they are the payload.
_VERBOSE_OBJECT_FIELDS = frozenset({"description", "comments", "attachments"})

_COMPACT_KEEP_FIELDS = frozenset(
    {
        # identity
        "id", "name", "title", "identifier", "code", "slug", "key",
        # categorisation
        "status", "state", "type", "kind", "priority",
        # communication
        "url", "email",
        # money
        "price", "amount", "cost", "fare", "rate", "currency",
        # metrics
        "rating", "score", "count",
        # locale / geo
        "language", "locale", "country", "region", "city", "domain",
        # time
        "created_at", "updated_at", "createdAt", "updatedAt", "date",
        # versioning
        "version",
    }
)


@dataclass
class DataProvenance:
    """Where a response came from and, for local data, when it was synced."""

    source: str
    synced_at: datetime | None = None
    reason: str = ""
    resource_type: str = ""
    freshness: Any = None


def camel_to_kebab(s: str) -> str:
    """Convert ``orderDate`` to ``order-date``; lowercase input is only lowered."""
    out: list[str] = []
    prev = ""
    for index, ch in enumerate(s):
        if index > 0 and ch.isupper() and prev.islower():
            out.append("-")
        out.append(ch.lower())
        prev = ch
    return "".join(out)


def _match_segment(field_name: str, keep_whole: set[str], sub_paths: dict[str, list[list[str]]]) -> str:
    lower = field_name.lower()
    if lower in keep_whole or lower in sub_paths:
        return lower
    kebab = camel_to_kebab(field_name)
    if kebab != lower and (kebab in keep_whole or kebab in sub_paths):
        return kebab
    return ""


def _filter_rec(data: Any, paths: list[list[str]]) -> Any:
    if isinstance(data, list):
        return [_filter_rec(element, paths) for element in data]
    if not isinstance(data, dict):
        return data

    keep_whole: set[str] = set()
    sub_paths: dict[str, list[list[str]]] = {}
    for path in paths:
        if not path:
            continue
        head, rest = path[0], path[1:]
        if rest:
            sub_paths.setdefault(head, []).append(rest)
        else:
            keep_whole.add(head)

    filtered: dict[str, Any] = {}
    matched_any = False
    for key, value in data.items():
        matched = _match_segment(key, keep_whole, sub_paths)
        if not matched:
            continue
        matched_any = True
        if matched in keep_whole:
            filtered[key] = value
        elif matched in sub_paths:
            filtered[key] = _filter_rec(value, sub_paths[matched])

    if not matched_any:
        # Treat an object with array siblings as a list envelope and select
        # inside the arrays, passing the metadata siblings through.
        pending: dict[str, Any] = {}
        found_array = False
        for key, value in data.items():
            if isinstance(value, list):
                found_array = True
                pending[key] = _filter_rec(value, paths)
            else:
                pending[key] = value
        if found_array:
            filtered.update(pending)
    return filtered


def filter_fields(data: Any, fields: str) -> Any:
    """Keep only the comma-separated fields; dotted paths descend into nesting."""
    paths = [
        [part.lower() for part in field.split(".")]
        for field in (f.strip() for f in fields.split(","))
        if field
    ]
    if not paths:
        return data
    return _filter_rec(data, paths)


def is_compact_scalar(value: Any) -> bool:
    """Whether a value is a short primitive: string, number, bool or null."""
    return value is None or isinstance(value, (bool, int, float, str))


def _compact_list(items: list[dict[str, Any] | None]) -> list[Any]:
    keep = set(_COMPACT_KEEP_FIELDS)
    if items:
        counts: dict[str, int] = {}
        for item in items:
            for key, value in (item or {}).items():
                if key in _VERBOSE_LIST_FIELDS or not is_compact_scalar(value):
                    continue
                counts[key] = counts.get(key, 0) + 1
        threshold = (len(items) * 4 + 4) // 5
        if len(items) >= 2 and threshold > len(items) - 1:
            threshold = len(items) - 1
        keep.update(key for key, count in counts.items() if count >= threshold)

    result: list[Any] = []
    for item in items:
        compact = {key: value for key, value in (item or {}).items() if key in keep}
        result.append(compact if compact else item)
    return result


def compact_fields(data: Any) -> Any:
    """Reduce a response to its high-signal fields for agent consumption."""
    if isinstance(data, list) and all(item is None or isinstance(item, dict) for item in data):
        return _compact_list(data)
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if key not in _VERBOSE_OBJECT_FIELDS}
    return data


def extract_response_data(data: Any) -> Any:
    """Unwrap a ``{"status": "success", "data": ...}`` envelope; otherwise return as is."""
    if not isinstance(data, dict) or "data" not in data:
        return data
    status = data.get("status", "")
    if not isinstance(status, str) or not status:
        return data
    return data["data"] if status in _SUCCESS_STATUSES else data


def unwrap_single_key_array(text: str | bytes) -> str:
    """Flatten ``{"results": [...]}``-style single-key envelopes to the bare array."""
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    if not text.lstrip(" \t\r\n").startswith("{"):
        return text
    try:
        obj = json.loads(text)
    except ValueError:
        return text
    if not isinstance(obj, dict) or len(obj) != 1:
        return text
    (key, value), = obj.items()
    if key not in _LIST_WRAPPER_KEYS or not isinstance(value, list):
        return text
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _format_rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def wrap_with_provenance(text: str | bytes, prov: DataProvenance) -> str:
    """Wrap a response in ``{"meta": {...}, "results": ...}`` and return it as JSON.

    Non-JSON payloads (XML, plain text) are embedded as a string.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")

    meta: dict[str, Any] = {"source": prov.source}
    if prov.synced_at is not None:
        meta["synced_at"] = _format_rfc3339(prov.synced_at)
    if prov.reason:
        meta["reason"] = prov.reason
    if prov.resource_type:
        meta["resource_type"] = prov.resource_type
    if prov.freshness is not None:
        meta["freshness"] = prov.freshness

    try:
        json.loads(text)
    except ValueError:
        results: Any = text
    else:
        results = json.loads(unwrap_single_key_array(text))

    envelope = {"meta": dict(sorted(meta.items())), "results": results}
    return json.dumps(envelope, ensure_ascii=False, separators=(",", ":"))