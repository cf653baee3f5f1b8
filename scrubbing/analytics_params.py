"""
Strip PII keys from product-analytics event parameters.

Unlike error telemetry, analytics parameters have no debugging value in
identity fields, so matching keys are removed outright rather than replaced
with a placeholder.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

# Keys removed at every depth (exact match).
PII_FIELDS = frozenset(
    {
        "email",
        "name",
        "display_name",
        "phone",
        "password",
        "token",
        "access_token",
        "refresh_token",
        "sobriety_date",
        "relapse_date",
    }
)

MAX_DEPTH = 10

_OMIT = object()


def _strip(value: Any, ancestors: set[int], depth: int) -> Any:
    if not isinstance(value, (Mapping, list, tuple)):
        return value
    if depth > MAX_DEPTH or id(value) in ancestors:
        return _OMIT

    ancestors.add(id(value))
    try:
        if isinstance(value, Mapping):
            out = {}
            for k, v in value.items():
                if k in PII_FIELDS:
                    continue
                cleaned = _strip(v, ancestors, depth + 1)
                if cleaned is not _OMIT:
                    out[k] = cleaned
            return out
        return [item for item in (_strip(v, ancestors, depth + 1) for v in value) if item is not _OMIT]
    finally:
        # Only the current path counts as a cycle; shared siblings are fine.
        ancestors.discard(id(value))


def sanitize_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Return a copy of analytics params with PII keys removed.

    Containers that refer back to one of their ancestors, or that sit deeper
    than MAX_DEPTH, are omitted.
    """
    if not params or not isinstance(params, Mapping):
        return {}
    cleaned = _strip(params, set(), 0)
    return cleaned if isinstance(cleaned, dict) else {}
