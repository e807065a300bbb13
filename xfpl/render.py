"""Human-readable rendering of JSON responses: colours, tables, cards and CSV."""

from __future__ import annotations

import csv
import io
import json
import math
import os
import re
from typing import Any, Iterable, TextIO

_ANSI_CODES = {"bold": "1", "green": "32", "red": "31", "yellow": "33"}
_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

_CELL_LIMIT = 60
_SUMMARY_LIMIT = 80
_MAX_TABLE_COLUMNS = 6
_TABLE_MIN_WIDTH = 2
_TABLE_PADDING = 2

# Field-name tiers: identity, temporal, status, value, category.
_EXACT_TIERS = {
    "id": 0, "name": 0, "title": 0, "slug": 0, "key": 0,
    "date": 1, "created": 1, "updated": 1, "createdat": 1, "updatedat": 1,
    "status": 2, "state": 2, "statuscode": 2,
    "summary": 3, "description": 3, "price": 3, "amount": 3, "total": 3,
    "cost": 3, "points": 3, "score": 3,
    "type": 4, "kind": 4, "category": 4, "email": 4, "phone": 4, "url": 4,
}
_SUFFIX_TIERS = {
    "id": 0, "name": 0, "title": 0,
    "date": 1, "time": 1,
    "status": 2, "state": 2, "code": 2,
    "price": 3, "amount": 3, "total": 3, "cost": 3,
    "summary": 3, "description": 3, "points": 3, "score": 3,
    "type": 4, "kind": 4, "category": 4, "method": 4,
}
_UNCLASSIFIED = 5

_CARD_SKIP_VALUES = frozenset({"", "false", "0", "[]", "null"})


def color_enabled(no_color: bool, human_friendly: bool, stream: TextIO | None) -> bool:
    """Whether ANSI colours should be written to ``stream``.

    Colours are opt-in: they need human-friendly mode, no NO_COLOR, a
    non-dumb terminal, and a stream attached to a TTY.
    """
    if no_color or not human_friendly:
        return False
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    if stream is None:
        return False
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return True


def paint(text: str, color: str, enabled: bool) -> str:
    """Wrap text in the ANSI sequence for ``color`` when colouring is enabled."""
    try:
        code = _ANSI_CODES[color]
    except KeyError:
        raise ValueError(f"unknown color {color!r}") from None
    if not enabled:
        return text
    return f"\033[{code}m{text}\033[0m"


def _visible_len(text: str) -> int:
    return len(_ANSI_RE.sub("", text))


def truncate(s: str, limit: int) -> str:
    """Shorten ``s`` to ``limit`` characters, ending in "..." when room allows."""
    if len(s) <= limit:
        return s
    if limit <= 3:
        return s[:limit]
    return s[: limit - 3] + "..."


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def _format_number(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return f"{value:.2f}"


def format_cell_value(value: Any) -> str:
    """Render one JSON value as a short single-cell string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        if len(value) >= 19 and value[4] == "-" and value[7] == "-" and value[10] == "T":
            return value[:10]
        return truncate(value, _CELL_LIMIT)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, list):
        if not value:
            return ""
        if isinstance(value[0], dict):
            return _format_object_array(value)
        parts = [item if isinstance(item, str) else _dump(item) for item in value]
        return truncate(", ".join(parts), _CELL_LIMIT)
    if isinstance(value, dict):
        return _format_single_object(value)
    return truncate(_dump(value), _CELL_LIMIT)


def find_field(obj: dict[str, Any], *args: str) -> str:
    """Return the formatted value of the first name found (case-insensitively)."""
    for name in args:
        wanted = name.casefold()
        for key, value in obj.items():
            if key.casefold() == wanted:
                return format_cell_value(value)
    return ""


def _format_object_array(items: Iterable[Any]) -> str:
    lines = [format_object_summary(item) for item in items if isinstance(item, dict)]
    if not lines:
        return ""
    # A leading newline tells the card renderer to indent the block.
    return "\n" + "\n".join(lines)


def format_object_summary(obj: dict[str, Any]) -> str:
    """Summarise an object on one line as quantity, name, size and price."""
    parts: list[str] = []

    qty = find_field(obj, "qty", "count", "quantity")
    if qty and qty not in ("1", "0"):
        parts.append(qty + "x")
    elif qty == "1":
        parts.append("1x")

    name = find_field(obj, "name", "title", "label", "description")
    if not name:
        for key in ("Side1", "side1", "Item", "item", "Product", "product"):
            nested = obj.get(key)
            if isinstance(nested, dict):
                name = find_field(nested, "name", "title", "label")
                if name:
                    break
    if name:
        parts.append(name)

    size = find_field(obj, "sizename", "size_name") or find_field(obj, "catname", "cat_name", "category")
    if size:
        parts.extend(["—", size])

    price = find_field(obj, "extprice", "price", "amount", "total")
    if price and price != "0":
        parts.append(f"(${price})")

    if not parts:
        return truncate(_dump(obj), _SUMMARY_LIMIT)
    return "    " + " ".join(parts)


def _format_single_object(obj: dict[str, Any]) -> str:
    return find_field(obj, "name", "title", "label", "description") or find_field(obj, "id", "key", "code")


def split_camel_case(s: str) -> list[str]:
    """Split ``OrderDate``, ``statusCode`` or ``page_size`` into lowercase words."""
    segments: list[str] = []
    current: list[str] = []
    prev = ""
    for index, ch in enumerate(s):
        if ch in "_-":
            if current:
                segments.append("".join(current))
                current = []
            prev = ch
            continue
        if index > 0 and ch.isupper() and prev.islower() and current:
            segments.append("".join(current))
            current = []
        current.append(ch.lower())
        prev = ch
    if current:
        segments.append("".join(current))
    return segments


def _field_tier(key: str, value: Any) -> int:
    lower = key.lower()
    tier = _UNCLASSIFIED
    if lower in _EXACT_TIERS:
        tier = _EXACT_TIERS[lower]
    else:
        segments = split_camel_case(lower)
        if segments and segments[-1] in _SUFFIX_TIERS:
            tier = _SUFFIX_TIERS[segments[-1]]
            if len(segments) > 1:
                # A prefix dilutes the signal of the suffix.
                tier += 1
    if isinstance(value, bool) and tier >= _UNCLASSIFIED:
        tier = _UNCLASSIFIED + 1
    return tier


def prioritize_fields(item: dict[str, Any], include_complex: bool = False) -> list[str]:
    """Order field names by importance: identity, time, status, value, other.

    Without ``include_complex`` arrays and objects are left out; with it,
    fields whose rendered value is empty are left out instead.
    """
    scored: list[tuple[int, int, str]] = []
    for index, (key, value) in enumerate(
        (k, v)
        for k, v in item.items()
        if (include_complex and format_cell_value(v) != "")
        or (not include_complex and not isinstance(v, (list, dict)))
    ):
        scored.append((_field_tier(key, value), index, key))
    scored.sort()
    return [key for _, _, key in scored]


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, dict)):
        return _dump(value)
    return str(value)


def render_csv(data: Any) -> str:
    """Render a list of objects as CSV with a sorted header row.

    Anything that is not a non-empty list of objects is written back as JSON.
    """
    if isinstance(data, (bytes, str)):
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        try:
            data = json.loads(text)
        except ValueError:
            return text + "\n"
    if not isinstance(data, list) or not data or not all(i is None or isinstance(i, dict) for i in data):
        return _dump(data) + "\n"
    rows = [item or {} for item in data]
    keys = sorted({key for row in rows for key in row})
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(keys)
    for row in rows:
        writer.writerow([_csv_value(row.get(key)) for key in keys])
    return out.getvalue()


def render_table(items: list[dict[str, Any]], colored: bool = False) -> str:
    """Render rows as an aligned table of at most six scalar columns."""
    if not items:
        return ""
    headers = prioritize_fields(items[0] or {}, False)[:_MAX_TABLE_COLUMNS]
    lines = [[paint(h.upper(), "bold", colored) for h in headers]]
    for item in items:
        row = item or {}
        lines.append([format_cell_value(row.get(h)) for h in headers])

    widths = [
        max(_TABLE_MIN_WIDTH, max(_visible_len(line[col]) for line in lines) + _TABLE_PADDING)
        for col in range(len(headers) - 1)
    ]
    rendered = []
    for line in lines:
        cells = [
            cell + " " * (widths[col] - _visible_len(cell)) if col < len(widths) else cell
            for col, cell in enumerate(line)
        ]
        rendered.append("".join(cells))
    return "\n".join(rendered) + "\n"


def render_cards(items: list[dict[str, Any]], colored: bool = False) -> str:
    """Render each item as a labelled block, for wide or nested rows."""
    if not items:
        return ""
    headers = prioritize_fields(items[0] or {}, True)
    if not headers:
        return ""
    max_len = max(len(h) for h in headers)
    lines: list[str] = []
    for index, raw in enumerate(items):
        item = raw or {}
        if index > 0:
            lines.append("")
        label = paint(headers[0].upper(), "bold", colored)
        title = format_cell_value(item.get(headers[0]))
        second = format_cell_value(item.get(headers[1])) if len(headers) > 1 else ""
        lines.append(f"{label} {title} — {second}" if second else f"{label} {title}")
        for header in headers[2:]:
            value = format_cell_value(item.get(header))
            if value in _CARD_SKIP_VALUES:
                continue
            if value.startswith("\n"):
                lines.append(f"  {header}:{value}")
            else:
                lines.append(f"  {(header + ':').ljust(max_len)}  {value}")
    return "\n".join(lines) + "\n"


def render_auto(items: list[dict[str, Any]], colored: bool = False) -> str:
    """Choose a table for flat rows and cards for wide or nested ones."""
    if not items:
        return ""
    first = items[0] or {}
    scalar_count = sum(
        1 for v in first.values() if v is None or isinstance(v, (bool, int, float, str))
    )
    if len(first) > 8 or scalar_count < len(first) - 2:
        return render_cards(items, colored)
    return render_table(items, colored)