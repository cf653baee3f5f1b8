"""
Configuration surface for the telemetry privacy sanitizer.

Everything the sanitizers treat as policy lives here as plain data:
- which field names are sensitive (matched case-insensitively on the key)
- which query-string keys carry OAuth credentials
- how much of a large string is scanned (chunk size)
- how long a quoted run must be before it is considered user content
- how structured backend-query URLs are recognized

The defaults mirror what the mobile app ships with. Overrides can be merged
in code or loaded from a JSON file; both paths validate eagerly so that a bad
policy fails at startup, not on the logging hot path.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Iterable, Mapping
import json
import re


@dataclass(frozen=True, slots=True)
class SanitizerConfig:
    """
    Immutable sanitizer policy.

    - sensitive_fields: lower-case key names whose values are always replaced
    - oauth_params: query keys stripped from URLs
    - chunk_size: characters scanned at each end of a very large string
    - min_quoted_length: shortest double-quoted run treated as user content
    - backend_query_path: regex with one group capturing the table name
    - backend_host_markers: host substrings identifying the data backend
    - max_depth: deepest container walked; anything deeper is filtered whole
    """

    sensitive_fields: frozenset[str]
    oauth_params: tuple[str, ...]
    chunk_size: int = 10_000
    min_quoted_length: int = 10
    backend_query_path: str = r"/rest/v1/([^?#]+)"
    backend_host_markers: tuple[str, ...] = ("supabase",)
    max_depth: int = 100


def normalize_fields(names: Iterable[str]) -> frozenset[str]:
    return frozenset(str(n).strip().lower() for n in names)


DEFAULT_CONFIG = SanitizerConfig(
    sensitive_fields=normalize_fields(
        [
            "message",
            "content",
            "description",
            "reflection",
            "sobriety_date",
            "relapse_date",
            "notes",
            "email",
            "phone",
            "name",
            "display_name",
            "password",
            "token",
            "access_token",
            "refresh_token",
        ]
    ),
    oauth_params=("access_token", "refresh_token", "code", "id_token", "state"),
)

_FIELD_NAMES = {f.name for f in fields(SanitizerConfig)}

# Each level costs up to two interpreter frames; stay well under the recursion limit.
MAX_DEPTH_LIMIT = 200


def validate_config(config: SanitizerConfig) -> None:
    if config.chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {config.chunk_size!r}")
    if config.min_quoted_length < 1:
        raise ValueError(f"min_quoted_length must be >= 1, got {config.min_quoted_length!r}")
    if not 1 <= config.max_depth <= MAX_DEPTH_LIMIT:
        raise ValueError(f"max_depth must be in [1, {MAX_DEPTH_LIMIT}], got {config.max_depth!r}")
    for name in config.sensitive_fields:
        if not name or name != name.lower():
            raise ValueError(f"sensitive field names must be non-empty and lower-case, got {name!r}")
    for param in config.oauth_params:
        if not param:
            raise ValueError("oauth_params must not contain empty names")
    try:
        groups = re.compile(config.backend_query_path).groups
    except re.error as e:
        raise ValueError(f"backend_query_path is not a valid regex: {e}") from e
    if groups != 1:
        raise ValueError("backend_query_path must have exactly one capture group (the table name)")


def merge_config(base: SanitizerConfig, overrides: Mapping[str, Any]) -> SanitizerConfig:
    """
    Create a new config by overlaying `overrides` on top of `base`.

    Collection fields may be given as any iterable of strings.
    """
    unknown = set(overrides) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"Unknown sanitizer config keys: {sorted(unknown)!r}")

    changes: dict[str, Any] = dict(overrides)
    if "sensitive_fields" in changes:
        changes["sensitive_fields"] = normalize_fields(changes["sensitive_fields"])
    for key in ("oauth_params", "backend_host_markers"):
        if key in changes:
            changes[key] = tuple(str(x) for x in changes[key])
    for key in ("chunk_size", "min_quoted_length", "max_depth"):
        if key in changes:
            changes[key] = int(changes[key])

    merged = replace(base, **changes)
    validate_config(merged)
    return merged


def load_config_from_json(path: str) -> SanitizerConfig:
    """
    Load overrides from a JSON file and merge them over DEFAULT_CONFIG.

    Expected JSON shape (every key optional):
    {
      "sensitive_fields": ["email", "notes", ...],
      "oauth_params": ["access_token", "code"],
      "chunk_size": 10000,
      "min_quoted_length": 10,
      "backend_query_path": "/rest/v1/([^?#]+)",
      "backend_host_markers": ["supabase"],
      "max_depth": 100
    }
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError("Sanitizer config JSON must be an object")
    return merge_config(DEFAULT_CONFIG, raw)
