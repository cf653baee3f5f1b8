"""
Regex-based scrubbing of free text before it leaves the device.

Passes (applied in this order):
- email addresses -> "[email]"
- double-quoted runs of user-length content -> "[Filtered]" (quotes kept)
- http(s) URLs -> OAuth parameters and fragment stripped
- explicit "access_token: ..." style pairs -> "key: [FILTERED]"

These are heuristics, not PII detection. Work is bounded: strings longer than
two chunks are scanned at the head and tail only, and the middle is passed
through unscanned. A value placed strictly in the middle of a huge string is
therefore not redacted.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
import re

from scrubbing.url_sanitizer import sanitize_url
from scrubbing.value_redactor import (
    CIRCULAR_PLACEHOLDER,
    FILTERED_PLACEHOLDER,
    JSON_SCALARS,
    is_sensitive_key,
)
from utils.sanitizer_config import DEFAULT_CONFIG, SanitizerConfig

EMAIL_PLACEHOLDER = "[email]"
TOKEN_PLACEHOLDER = "[FILTERED]"

# Practical email pattern (not RFC-5322 complete).
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# http(s) URLs up to whitespace, quotes or angle brackets.
URL_IN_STRING_RE = re.compile(r"https?://[^\s'\"<>]+")

# "access_token: eyJ..." / "code: 'abc'" as written by console logging.
TOKEN_VALUE_RE = re.compile(
    r"""
    (access_token|refresh_token|id_token|code|state)  # key
    :\s*
    ['"]?
    ([^\s'"]+)                                        # value
    ['"]?
    """,
    flags=re.IGNORECASE | re.VERBOSE,
)


def _quoted_re(min_length: int) -> "re.Pattern[str]":
    return re.compile(rf'"[^"]{{{min_length},}}"')


def redact_emails(text: str) -> str:
    return EMAIL_RE.sub(EMAIL_PLACEHOLDER, text)


def redact_quoted(text: str, *, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """
    Replace long double-quoted runs with "[Filtered]".

    Short quoted strings are left alone so that technical identifiers
    (column names, enum values, error codes) stay readable.
    """
    return _quoted_re(config.min_quoted_length).sub(f'"{FILTERED_PLACEHOLDER}"', text)


def sanitize_urls_in_string(text: str, *, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """
    Sanitize every http(s) URL found inside text.

    >>> sanitize_urls_in_string("Redirect URL: https://app.com?access_token=secret&page=1")
    'Redirect URL: https://app.com?page=1'
    """
    if not text or not isinstance(text, str):
        return text
    return URL_IN_STRING_RE.sub(lambda m: sanitize_url(m.group(0), config=config), text)


def sanitize_token_values(text: str) -> str:
    """
    Redact token values logged explicitly.

    >>> sanitize_token_values("Hash access_token: eyJabc123xyz")
    'Hash access_token: [FILTERED]'
    """
    if not text or not isinstance(text, str):
        return text
    return TOKEN_VALUE_RE.sub(rf"\1: {TOKEN_PLACEHOLDER}", text)


def _sanitize_chunk(text: str, config: SanitizerConfig) -> str:
    text = redact_emails(text)
    text = redact_quoted(text, config=config)
    text = sanitize_urls_in_string(text, config=config)
    return sanitize_token_values(text)


def sanitize_string(text: str, *, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """
    Apply all scrubbing passes to text with bounded cost.

    Up to 2 * chunk_size characters are scanned whole. Longer strings have only
    their first and last chunk_size characters scanned; the middle is kept
    verbatim.
    """
    if not text or not isinstance(text, str):
        return text

    size = config.chunk_size
    if len(text) <= size * 2:
        return _sanitize_chunk(text, config)

    head = _sanitize_chunk(text[:size], config)
    tail = _sanitize_chunk(text[-size:], config)
    return head + text[size:-size] + tail


def sanitize_console_value(
    value: Any,
    *,
    config: SanitizerConfig = DEFAULT_CONFIG,
    _visited: Optional[set[int]] = None,
    _depth: int = 0,
) -> Any:
    """
    Scrub a value captured from console/debug logging.

    Strings get every scrubbing pass; dict keys in the sensitive set are
    replaced by "[Filtered]"; lists and dicts are walked recursively. Other
    scalars pass through unchanged; any other object is reduced to its type
    name. Containers nested deeper than config.max_depth become "[Filtered]".
    """
    if isinstance(value, str):
        return sanitize_string(value, config=config)
    if isinstance(value, JSON_SCALARS):
        return value

    if _visited is None:
        _visited = set()

    if isinstance(value, (Mapping, list, tuple)) and _depth > config.max_depth:
        return FILTERED_PLACEHOLDER

    if isinstance(value, Mapping):
        if id(value) in _visited:
            return CIRCULAR_PLACEHOLDER
        _visited.add(id(value))
        out = {}
        for k, v in value.items():
            if is_sensitive_key(k, config=config):
                out[k] = FILTERED_PLACEHOLDER
            else:
                out[k] = sanitize_console_value(v, config=config, _visited=_visited, _depth=_depth + 1)
        return out

    if isinstance(value, (list, tuple)):
        if id(value) in _visited:
            return CIRCULAR_PLACEHOLDER
        _visited.add(id(value))
        return [
            sanitize_console_value(item, config=config, _visited=_visited, _depth=_depth + 1)
            for item in value
        ]

    # Arbitrary objects handed to a logger: only the type name survives.
    return f"<{type(value).__name__}>"
