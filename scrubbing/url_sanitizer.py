"""
Strip OAuth credentials from URLs and route strings.

Handles:
- absolute URLs (http:// or https://): OAuth query keys removed, fragment dropped
- relative URLs / app routes (e.g. "/callback?code=abc#state=x")

Fragments are always removed: implicit-flow OAuth puts bearer tokens there.
Parsing never raises to the caller; on failure the query string and fragment
are cut off entirely.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import unquote_plus, urlsplit, urlunsplit
import logging
import re

from utils.sanitizer_config import DEFAULT_CONFIG, SanitizerConfig

logger = logging.getLogger(__name__)


def filter_query(query: str, blocked: tuple[str, ...]) -> str:
    """
    Drop blocked keys from a raw query string.

    Kept pairs are emitted exactly as written (same order, same encoding).
    """
    kept = []
    for pair in query.split("&"):
        if not pair:
            continue
        key = unquote_plus(pair.split("=", 1)[0])
        if key in blocked:
            continue
        kept.append(pair)
    return "&".join(kept)


def _fallback(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0]


def sanitize_url(url: str, *, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """
    Remove OAuth-sensitive parameters and the fragment from a URL or route.

    >>> sanitize_url("https://app.com/callback?access_token=secret&state=abc&page=1")
    'https://app.com/callback?page=1'
    >>> sanitize_url("/auth/callback#access_token=secret")
    '/auth/callback'
    """
    if not url or not isinstance(url, str):
        return url

    try:
        if url.startswith("http://") or url.startswith("https://"):
            parts = urlsplit(url)
            # Touching .port validates the netloc (raises ValueError on junk).
            parts.port
            query = filter_query(parts.query, config.oauth_params)
            return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))

        path_and_query = url.split("#", 1)[0]
        # Only the first query segment counts; anything after a second "?" is dropped.
        segments = path_and_query.split("?")
        path = segments[0]
        query = segments[1] if len(segments) > 1 else ""
        if not query:
            return path
        filtered = filter_query(query, config.oauth_params)
        return f"{path}?{filtered}" if filtered else path
    except ValueError:
        logger.debug("URL parse failed; stripping query and fragment")
        return _fallback(url)


def extract_table_name(url: str, *, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """Table name from a backend REST URL, or "unknown"."""
    m = re.search(config.backend_query_path, url or "")
    return m.group(1) if m else "unknown"


def is_backend_query_url(url: Optional[str], *, config: SanitizerConfig = DEFAULT_CONFIG) -> bool:
    """
    True for structured backend data-query URLs.

    Recognized either by the REST path pattern or by a configured marker in
    the host. An unparsable URL counts as a backend query, which keeps only
    the operation shape.
    """
    if not url or not isinstance(url, str):
        return False
    if re.search(config.backend_query_path, url):
        return True
    try:
        host = urlsplit(url).netloc.lower()
    except ValueError:
        return True
    return any(marker in host for marker in config.backend_host_markers)

