"""
discovery_sdk.tier0_core.errors
────────────────────────────────
Error taxonomy for the discovery client core. Every error carries a stable
machine-readable code plus internal detail.

Most failure modes in this package are absorbed where they happen (a missing
property resolves to its default, a failed metadata lookup is an unchanged
refresh). These classes exist for the few places that do raise: invalid
bootstrap settings, unreadable property files, and metadata access on a
data-center variant that has none.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class DiscoveryError(Exception):
    """
    Base class for all discovery client errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - detail: internal context for logs
    - metadata: structured fields, merged into log events by callers
    """

    code: str = "discovery_error"

    def __init__(
        self,
        detail: str = "An unexpected discovery client error occurred.",
        code: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.detail = detail
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "detail": self.detail,
                **self.metadata,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class ConfigurationError(DiscoveryError):
    """Misconfiguration detected at startup."""
    code = "configuration_error"


class PropertySourceError(DiscoveryError):
    """A property file exists but could not be read or parsed."""
    code = "property_source_error"

    def __init__(
        self,
        detail: str = "Property source could not be loaded.",
        code: str | None = None,
        path: str | None = None,
        **metadata: Any,
    ) -> None:
        self.path = path
        if path is not None:
            metadata["path"] = path
        super().__init__(detail, code, **metadata)


class MetadataUnavailableError(DiscoveryError):
    """Host metadata was requested from a data-center variant that cannot supply it."""
    code = "metadata_unavailable"


__all__ = [
    "DiscoveryError",
    "ConfigurationError",
    "PropertySourceError",
    "MetadataUnavailableError",
]
