"""
Sanitize a full diagnostic event immediately before it is transmitted.

- request.data: sensitive fields filtered at any depth (fresh cycle tracking)
- message / logentry text: email addresses redacted, nothing else, so that
  top-level error summaries stay readable
- exception values: every string scrubbing pass
- user: reduced to its id
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from scrubbing.string_scrubber import redact_emails, sanitize_string
from scrubbing.value_redactor import sanitize_value
from utils.sanitizer_config import DEFAULT_CONFIG, SanitizerConfig

Event = dict[str, Any]


def _sanitize_request(request: Any, config: SanitizerConfig) -> Any:
    if not isinstance(request, Mapping) or request.get("data") is None:
        return request
    return {**request, "data": sanitize_value(request["data"], config=config)}


def _sanitize_logentry(logentry: Any) -> Any:
    if not isinstance(logentry, Mapping):
        return logentry
    out = dict(logentry)
    for key in ("message", "formatted"):
        if isinstance(out.get(key), str):
            out[key] = redact_emails(out[key])
    return out


def _sanitize_exception_entry(entry: Any, config: SanitizerConfig) -> Any:
    if not isinstance(entry, Mapping) or not isinstance(entry.get("value"), str):
        return entry
    return {**entry, "value": sanitize_string(entry["value"], config=config)}


def _sanitize_exception(exception: Any, config: SanitizerConfig) -> Any:
    # Accept both a bare list of entries and the SDK's {"values": [...]} wrapper.
    if isinstance(exception, list):
        return [_sanitize_exception_entry(e, config) for e in exception]
    if isinstance(exception, Mapping) and isinstance(exception.get("values"), list):
        return {
            **exception,
            "values": [_sanitize_exception_entry(e, config) for e in exception["values"]],
        }
    return exception


def _reduce_user(user: Any) -> dict[str, Any]:
    if isinstance(user, Mapping) and "id" in user:
        return {"id": user["id"]}
    return {}


def sanitize_event(event: Event, *, config: SanitizerConfig = DEFAULT_CONFIG) -> Optional[Event]:
    """
    Return a sanitized copy of a diagnostic event.

    Never returns None under the current rules; None is reserved for
    event-dropping policies. The input event is not mutated.
    """
    if not isinstance(event, Mapping):
        return None

    sanitized = dict(event)

    if "request" in sanitized:
        sanitized["request"] = _sanitize_request(sanitized["request"], config)

    if isinstance(sanitized.get("message"), str):
        sanitized["message"] = redact_emails(sanitized["message"])

    if "logentry" in sanitized:
        sanitized["logentry"] = _sanitize_logentry(sanitized["logentry"])

    if "exception" in sanitized:
        sanitized["exception"] = _sanitize_exception(sanitized["exception"], config)

    if sanitized.get("user") is not None:
        sanitized["user"] = _reduce_user(sanitized["user"])

    return sanitized
