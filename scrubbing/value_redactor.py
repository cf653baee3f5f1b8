"""
Redact sensitive fields from arbitrary JSON-shaped values.

Privacy motivation:
- Request payloads attached to error reports can carry user-written content
  (journal reflections, notes, dates) and credentials. Redaction is keyed on
  field names, at any depth, regardless of the value's type.
- Self-referential structures must not hang or crash the reporting path, so
  containers are tracked by identity and revisits become a sentinel.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from utils.sanitizer_config import DEFAULT_CONFIG, SanitizerConfig

# Placeholders substituted for redacted content.
FILTERED_PLACEHOLDER = "[Filtered]"
CIRCULAR_PLACEHOLDER = "[Circular]"

JSON_SCALARS = (str, int, float, bool, type(None))

# Marks a value with no JSON equivalent; dropped from dicts, None in lists.
_OMIT = object()


def is_sensitive_key(key: Any, *, config: SanitizerConfig = DEFAULT_CONFIG) -> bool:
    return str(key).lower() in config.sensitive_fields


def _redact(value: Any, visited: set[int], config: SanitizerConfig, depth: int) -> Any:
    if isinstance(value, JSON_SCALARS):
        return value

    if isinstance(value, (Mapping, list, tuple)):
        if depth > config.max_depth:
            return FILTERED_PLACEHOLDER
        # Identity, not equality: two equal dicts are still two positions.
        if id(value) in visited:
            return CIRCULAR_PLACEHOLDER
        visited.add(id(value))

        if isinstance(value, Mapping):
            out = {}
            for k, v in value.items():
                if is_sensitive_key(k, config=config):
                    out[k] = FILTERED_PLACEHOLDER
                    continue
                cleaned = _redact(v, visited, config, depth + 1)
                if cleaned is not _OMIT:
                    out[k] = cleaned
            return out

        items = [_redact(item, visited, config, depth + 1) for item in value]
        items = [None if item is _OMIT else item for item in items]
        return tuple(items) if isinstance(value, tuple) else items

    return _OMIT


def sanitize_value(
    value: Any,
    visited: Optional[set[int]] = None,
    *,
    config: SanitizerConfig = DEFAULT_CONFIG,
) -> Any:
    """
    Return a copy of value with every sensitive field replaced by FILTERED_PLACEHOLDER.

    `visited` holds the ids of containers already walked during this pass; pass
    None (the default) to start a fresh pass. A container met a second time is
    replaced by CIRCULAR_PLACEHOLDER, and a container nested deeper than
    config.max_depth by FILTERED_PLACEHOLDER. Values with no JSON equivalent
    are dropped from dicts and become None inside lists.
    """
    if visited is None:
        visited = set()
    cleaned = _redact(value, visited, config, 0)
    return None if cleaned is _OMIT else cleaned
