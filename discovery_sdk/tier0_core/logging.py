"""
discovery_sdk.tier0_core.logging
─────────────────────────────────
Structured logs for the discovery client. Events are dotted names
("identity.refresh.updated", "properties.reload.failed") with key-value
fields. Proxy credentials never reach the output.

Output goes to one handler on the "discovery_sdk" logger, which does not
propagate, so a host application's root handlers do not print events twice.
Level and renderer come from DiscoverySettings (DISCOVERY_LOG_LEVEL,
DISCOVERY_LOG_FORMAT=json|console, or the same keys in .env).

Context fields (data center, refresher name) are scoped with log_context():

    with log_context(data_center="Amazon"):
        log.info("identity.refresh.updated", host_name="ec2-1-2-3-4")

Minimal stack: structlog over stdlib logging
"""
from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import IO, Any

import structlog

from discovery_sdk.tier0_core.config import DiscoverySettings, get_settings
from discovery_sdk.tier0_core.errors import ConfigurationError

LOGGER_NAME = "discovery_sdk"

_SECRET_SUFFIXES = ("password", "passwd", "secret")
_REDACTED = "[REDACTED]"

_handler: logging.Handler | None = None


def _redact_processor(logger: Any, method: str, event_dict: dict) -> dict:
    """Mask proxy passwords and any other *password or *secret field."""
    for key in event_dict:
        if key.lower().endswith(_SECRET_SUFFIXES):
            event_dict[key] = _REDACTED
    return event_dict


def _bootstrap_settings() -> DiscoverySettings:
    try:
        return get_settings()
    except ConfigurationError:
        # Bad settings raise again from get_settings() at the call site that
        # needs them; logging itself comes up on defaults so that can be logged.
        return DiscoverySettings.model_construct()


def configure_logging(
    settings: DiscoverySettings | None = None,
    stream: IO[str] | None = None,
) -> None:
    """
    (Re)install the discovery_sdk handler. Replaces any handler installed by
    an earlier call, so it is safe to call again after settings change.
    """
    global _handler
    settings = settings or _bootstrap_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_processor,
    ]
    if settings.log_format == "console":
        renderer: Any = structlog.dev.ConsoleRenderer()
    else:
        pre_chain.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    sdk_logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        sdk_logger.removeHandler(_handler)
    sdk_logger.addHandler(handler)
    sdk_logger.setLevel(level)
    sdk_logger.propagate = False
    _handler = handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger, configuring output on first use.

        log = get_logger(__name__)
        log.warning("address.order.unknown_key", token="bogus")
    """
    if _handler is None:
        configure_logging()
    return structlog.get_logger(name or LOGGER_NAME)


def log_context(**fields: Any) -> AbstractContextManager:
    """Bind *fields* to every event logged on this thread inside the block."""
    return structlog.contextvars.bound_contextvars(**fields)


__all__ = ["LOGGER_NAME", "configure_logging", "get_logger", "log_context"]
