"""
Category-based sanitization of diagnostic breadcrumbs.

Breadcrumbs are recorded continuously (HTTP calls, navigation, log lines) and
buffered until the next reported event, so each one is cleaned at creation
time. Policy per category:

- http / httplib + backend data query: only {method, table, status_code} survive
- http / httplib (anything else): OAuth parameters and fragment stripped from
  data.url, data["http.query"] and data["http.fragment"]
- navigation: only sanitized data.from / data.to survive
- console / debug: message and data are scrubbed like free text
- anything else: URLs and explicit token values in the message are scrubbed
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from scrubbing.string_scrubber import (
    URL_IN_STRING_RE,
    sanitize_console_value,
    sanitize_string,
    sanitize_token_values,
    sanitize_urls_in_string,
)
from scrubbing.url_sanitizer import (
    extract_table_name,
    filter_query,
    is_backend_query_url,
    sanitize_url,
)
from utils.sanitizer_config import DEFAULT_CONFIG, SanitizerConfig

Breadcrumb = dict[str, Any]

# "httplib" is what the Python SDK records for outgoing HTTP requests.
HTTP_CATEGORIES = frozenset({"http", "httplib"})
CONSOLE_CATEGORIES = frozenset({"console", "debug"})

HTTP_QUERY_KEY = "http.query"
HTTP_FRAGMENT_KEY = "http.fragment"


def _backend_query_data(data: Mapping[str, Any], url: str, config: SanitizerConfig) -> dict[str, Any]:
    # Payloads, filters and coordinates are dropped; only the operation shape is kept.
    out: dict[str, Any] = {}
    if "method" in data:
        out["method"] = data["method"]
    out["table"] = extract_table_name(url, config=config)
    if "status_code" in data:
        out["status_code"] = data["status_code"]
    return out


def _full_url(data: Mapping[str, Any]) -> str:
    # The Python SDK splits the query string out of "url" into "http.query".
    url = data.get("url") if isinstance(data.get("url"), str) else ""
    query = data.get(HTTP_QUERY_KEY)
    if isinstance(query, str) and query:
        return f"{url}?{query}"
    return url


def _sanitize_http(crumb: Breadcrumb, config: SanitizerConfig) -> Breadcrumb:
    data = crumb.get("data")
    if not isinstance(data, Mapping):
        return crumb
    url = _full_url(data)
    if not url and HTTP_FRAGMENT_KEY not in data:
        return crumb

    if is_backend_query_url(url, config=config):
        return {**crumb, "data": _backend_query_data(data, url, config)}

    out = {k: v for k, v in data.items() if k != HTTP_FRAGMENT_KEY}
    if isinstance(data.get("url"), str) and data["url"]:
        out["url"] = sanitize_url(data["url"], config=config)
    if HTTP_QUERY_KEY in out:
        query = out[HTTP_QUERY_KEY]
        query = filter_query(query, config.oauth_params) if isinstance(query, str) else ""
        if query:
            out[HTTP_QUERY_KEY] = query
        else:
            del out[HTTP_QUERY_KEY]
    return {**crumb, "data": out}


def _sanitize_navigation(crumb: Breadcrumb, config: SanitizerConfig) -> Breadcrumb:
    data = crumb.get("data")
    if not isinstance(data, Mapping):
        return crumb

    out: dict[str, Any] = {}
    for key in ("from", "to"):
        if isinstance(data.get(key), str):
            out[key] = sanitize_url(data[key], config=config)
    return {**crumb, "data": out}


def _sanitize_console(crumb: Breadcrumb, config: SanitizerConfig) -> Breadcrumb:
    sanitized = dict(crumb)
    if isinstance(sanitized.get("message"), str):
        sanitized["message"] = sanitize_string(sanitized["message"], config=config)
    if sanitized.get("data"):
        sanitized["data"] = sanitize_console_value(sanitized["data"], config=config)
    return sanitized


def _sanitize_other(crumb: Breadcrumb, config: SanitizerConfig) -> Breadcrumb:
    message = crumb.get("message")
    if not isinstance(message, str) or not URL_IN_STRING_RE.search(message):
        return crumb

    cleaned = sanitize_token_values(sanitize_urls_in_string(message, config=config))
    if cleaned == message:
        return crumb
    return {**crumb, "message": cleaned}


def sanitize_breadcrumb(
    breadcrumb: Breadcrumb,
    *,
    config: SanitizerConfig = DEFAULT_CONFIG,
) -> Optional[Breadcrumb]:
    """
    Return a sanitized copy of one breadcrumb, or None to drop it.

    The current rules always rewrite and never drop; None stays part of the
    contract for callers. The input breadcrumb is never mutated.
    """
    if not isinstance(breadcrumb, Mapping):
        return None

    category = breadcrumb.get("category")
    if not isinstance(category, str):
        category = None
    if category in HTTP_CATEGORIES:
        return _sanitize_http(breadcrumb, config)
    if category == "navigation":
        return _sanitize_navigation(breadcrumb, config)
    if category in CONSOLE_CATEGORIES:
        return _sanitize_console(breadcrumb, config)
    return _sanitize_other(breadcrumb, config)
