"""
Hook points for the Sentry SDK.

The SDK calls `before_send(event, hint)` once per captured event right before
transmission, and `before_breadcrumb(crumb, hint)` once per breadcrumb before
it is buffered. Both must never raise: a failing hook would either break the
logging path or let the raw item through. Any unexpected error drops the item.
"""

from __future__ import annotations

from typing import Any, Callable, Optional
import logging

import sentry_sdk

from telemetry_hooks.breadcrumbs import Breadcrumb, sanitize_breadcrumb
from telemetry_hooks.events import Event, sanitize_event
from utils.sanitizer_config import DEFAULT_CONFIG, SanitizerConfig, validate_config

logger = logging.getLogger(__name__)

BeforeSend = Callable[[Event, Any], Optional[Event]]
BeforeBreadcrumb = Callable[[Breadcrumb, Any], Optional[Breadcrumb]]

# Options that would bypass or weaken the privacy hooks.
_RESERVED_OPTIONS = ("before_send", "before_breadcrumb", "send_default_pii")


def make_before_send(config: SanitizerConfig = DEFAULT_CONFIG) -> BeforeSend:
    validate_config(config)

    def before_send(event: Event, hint: Any = None) -> Optional[Event]:
        try:
            return sanitize_event(event, config=config)
        except Exception as e:
            # Never log the payload itself.
            logger.warning("Dropping event: sanitizer failed with %s", type(e).__name__)
            return None

    return before_send


def make_before_breadcrumb(config: SanitizerConfig = DEFAULT_CONFIG) -> BeforeBreadcrumb:
    validate_config(config)

    def before_breadcrumb(crumb: Breadcrumb, hint: Any = None) -> Optional[Breadcrumb]:
        try:
            return sanitize_breadcrumb(crumb, config=config)
        except Exception as e:
            logger.warning(
                "Dropping %r breadcrumb: sanitizer failed with %s",
                crumb.get("category") if isinstance(crumb, dict) else None,
                type(e).__name__,
            )
            return None

    return before_breadcrumb


before_send = make_before_send()
before_breadcrumb = make_before_breadcrumb()


def build_sentry_options(
    dsn: Optional[str],
    *,
    environment: Optional[str] = None,
    release: Optional[str] = None,
    config: SanitizerConfig = DEFAULT_CONFIG,
    **extra: Any,
) -> dict[str, Any]:
    """
    Keyword options for `sentry_sdk.init` with the privacy hooks installed.

    `extra` is passed through to the SDK, except for options that would
    replace the hooks or re-enable default PII collection.
    """
    reserved = sorted(set(extra) & set(_RESERVED_OPTIONS))
    if reserved:
        raise ValueError(f"Options reserved by the privacy hooks: {reserved!r}")

    options: dict[str, Any] = {
        "dsn": dsn,
        "before_send": make_before_send(config),
        "before_breadcrumb": make_before_breadcrumb(config),
        "send_default_pii": False,
    }
    if environment is not None:
        options["environment"] = environment
    if release is not None:
        options["release"] = release
    options.update(extra)
    return options


def init_sentry(
    dsn: Optional[str],
    *,
    environment: Optional[str] = None,
    release: Optional[str] = None,
    config: SanitizerConfig = DEFAULT_CONFIG,
    **extra: Any,
) -> None:
    """Initialise the Sentry SDK with both privacy hooks."""
    options = build_sentry_options(
        dsn, environment=environment, release=release, config=config, **extra
    )
    sentry_sdk.init(**options)
    logger.info("Sentry initialised with privacy hooks (environment=%s)", environment)
