"""
Explain what the sanitizer changed, without repeating the raw values.

Used by the preview app: a raw event or breadcrumb is sanitized, then the raw
and sanitized values are walked in parallel to list every changed position.
Each record carries the type of the original value, never the value itself.
"""

from __future__ import annotations

from typing import Any, Iterable, Literal, Mapping, Optional, TypedDict
import json

from scrubbing.value_redactor import CIRCULAR_PLACEHOLDER, FILTERED_PLACEHOLDER
from telemetry_hooks.breadcrumbs import sanitize_breadcrumb
from telemetry_hooks.events import sanitize_event
from utils.sanitizer_config import DEFAULT_CONFIG, MAX_DEPTH_LIMIT, SanitizerConfig

ChangeKind = Literal["filtered", "circular", "removed", "rewritten", "replaced"]
PayloadKind = Literal["event", "breadcrumb"]

CHANGE_KINDS: tuple[ChangeKind, ...] = ("filtered", "circular", "removed", "rewritten", "replaced")


class RedactionDict(TypedDict):
    path: str
    change: ChangeKind
    before_type: str
    after: Any


class PreviewResult(TypedDict):
    sanitized: Any
    redactions: list[RedactionDict]
    summary: dict[str, int]


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _record(path: str, change: ChangeKind, before: Any, after: Any) -> RedactionDict:
    return {"path": path or "$", "change": change, "before_type": _type_name(before), "after": after}


def _walk(
    before: Any,
    after: Any,
    path: str,
    visited: set[tuple[int, int]],
    out: list[RedactionDict],
    depth: int = 0,
) -> None:
    if depth > MAX_DEPTH_LIMIT:
        return
    if after == FILTERED_PLACEHOLDER and before != FILTERED_PLACEHOLDER:
        out.append(_record(path, "filtered", before, after))
        return
    if after == CIRCULAR_PLACEHOLDER and before != CIRCULAR_PLACEHOLDER:
        out.append(_record(path, "circular", before, after))
        return

    if isinstance(before, (Mapping, list, tuple)):
        # A shared raw container can map to different sanitized copies.
        pair = (id(before), id(after))
        if pair in visited:
            return
        visited.add(pair)

    if isinstance(before, Mapping) and isinstance(after, Mapping):
        for k, v in before.items():
            child = f"{path}.{k}" if path else str(k)
            if k not in after:
                out.append(_record(child, "removed", v, None))
            else:
                _walk(v, after[k], child, visited, out, depth + 1)
        return

    if isinstance(before, (list, tuple)) and isinstance(after, (list, tuple)):
        for i, v in enumerate(before):
            child = f"{path}[{i}]"
            if i >= len(after):
                out.append(_record(child, "removed", v, None))
            else:
                _walk(v, after[i], child, visited, out, depth + 1)
        return

    if isinstance(before, str) and isinstance(after, str):
        if before != after:
            out.append(_record(path, "rewritten", before, after))
        return

    if _type_name(before) != _type_name(after) or before != after:
        out.append(_record(path, "replaced", before, after))


def diff_redactions(before: Any, after: Any) -> list[RedactionDict]:
    """
    List every position where the sanitized value differs from the raw one.

    Paths use dotted keys and [index] notation, e.g. "request.data.notes" or
    "exception.values[0].value"; "$" is the root. Positions nested deeper than
    MAX_DEPTH_LIMIT are not inspected.
    """
    out: list[RedactionDict] = []
    _walk(before, after, "", set(), out)
    return out


def summarize_redactions(items: Iterable[RedactionDict]) -> dict[str, int]:
    """Count redaction records per change kind (every kind present, possibly 0)."""
    counts = {kind: 0 for kind in CHANGE_KINDS}
    for item in items:
        counts[item["change"]] += 1
    return counts


def preview_payload(
    raw_json: str,
    kind: PayloadKind,
    *,
    config: SanitizerConfig = DEFAULT_CONFIG,
) -> PreviewResult:
    """
    Parse a JSON event or breadcrumb, sanitize it and explain the changes.

    Raises ValueError for invalid JSON, a non-object payload or an unknown kind.
    """
    try:
        payload = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    if not isinstance(payload, dict):
        raise ValueError("Payload must be a JSON object")

    sanitized: Optional[dict[str, Any]]
    if kind == "event":
        sanitized = sanitize_event(payload, config=config)
    elif kind == "breadcrumb":
        sanitized = sanitize_breadcrumb(payload, config=config)
    else:
        raise ValueError(f"Unknown payload kind: {kind!r}")

    redactions = diff_redactions(payload, sanitized)
    return {
        "sanitized": sanitized,
        "redactions": redactions,
        "summary": summarize_redactions(redactions),
    }
