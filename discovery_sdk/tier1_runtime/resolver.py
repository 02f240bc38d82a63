"""
discovery_sdk.tier1_runtime.resolver
─────────────────────────────────────
Resolve a bare property name into a typed effective value.

    resolver = ConfigResolver(source, namespace="eureka.")
    resolver.resolve("client.refresh.interval", 30)        # reads eureka.client.refresh.interval
    resolver.availability_zones("us-east-1")              # ["defaultZone"] when unset

Resolution order for every key:
  1. <namespace><suffix> in the property source
  2. the per-call default
  3. for composite keys, the documented fallback chain (region, zones,
     service URLs, secondary keys)

The type of the default selects the coercion (str, int, bool, list of str).
A value that cannot be coerced resolves to the default and logs a warning;
a missing key is never an error.

ConfigResolver holds no mutable state and caches nothing: the same key
against the same source state always yields the same value, and instances
are safe to share between threads. Hot reload is the source's concern.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from discovery_sdk.tier0_core.config import DEFAULT_NAMESPACE, DiscoverySettings, get_settings
from discovery_sdk.tier0_core.logging import get_logger
from discovery_sdk.tier0_core.properties import (
    MemoryPropertySource,
    PropertySource,
    load_property_source,
)

log = get_logger(__name__)

DEFAULT_ZONE = "defaultZone"
DEFAULT_REGION = "us-east-1"
GLOBAL_REGION_KEY = "eureka.region"

_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})


def split_list(value: str) -> list[str]:
    """
    Split a comma-separated property value.

    No whitespace trimming, no dropping of empty tokens: "a,,b " is
    ["a", "", "b "]. Total over every string.
    """
    return value.split(",")


class ConfigResolver:
    """Typed, namespaced reads over a PropertySource."""

    def __init__(self, source: PropertySource, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._source = source
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def source(self) -> PropertySource:
        return self._source

    def key(self, suffix: str) -> str:
        """Full property key for *suffix*."""
        return f"{self._namespace}{suffix}"

    # ── Generic resolution ────────────────────────────────────────────────────

    def resolve(self, suffix: str, default: Any = None) -> Any:
        """Resolve *suffix*, coercing to the type of *default* (str when None)."""
        if isinstance(default, bool):
            return self.get_bool(suffix, default)
        if isinstance(default, int):
            return self.get_int(suffix, default)
        if isinstance(default, (list, tuple)):
            return self.get_list(suffix, default)
        return self.get_string(suffix, default)

    def get_string(self, suffix: str, default: str | None = None) -> str | None:
        return self._string(self.key(suffix), default)

    def get_int(self, suffix: str, default: int) -> int:
        key = self.key(suffix)
        raw = self._source.get(key)
        if raw is None:
            return default
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        try:
            return int(str(raw).strip())
        except ValueError:
            log.warning("config.value.invalid", key=key, value=raw, expected="int", default=default)
            return default

    def get_bool(self, suffix: str, default: bool) -> bool:
        key = self.key(suffix)
        raw = self._source.get(key)
        if raw is None:
            return default
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        log.warning("config.value.invalid", key=key, value=raw, expected="bool", default=default)
        return default

    def get_list(
        self, suffix: str, default: str | Sequence[str] | None = None
    ) -> list[str]:
        """Resolve a comma-separated list. A string default is split the same way."""
        raw = self._source.get(self.key(suffix))
        if raw is None:
            if default is None:
                return []
            if isinstance(default, str):
                return split_list(default)
            return list(default)
        if isinstance(raw, (list, tuple)):
            return [str(item) for item in raw]
        return split_list(str(raw))

    def get_string_with_fallback(
        self, suffix: str, fallback_suffix: str, default: str | None = None
    ) -> str | None:
        """<ns><suffix>, else <ns><fallback_suffix>, else *default*."""
        return self.get_string(suffix, self.get_string(fallback_suffix, default))

    def _string(self, key: str, default: str | None) -> str | None:
        raw = self._source.get(key)
        if raw is None:
            return default
        return raw if isinstance(raw, str) else str(raw)

    # ── Composite keys ────────────────────────────────────────────────────────

    def region(self) -> str:
        """<ns>region, else the global eureka.region, else us-east-1."""
        global_region = self._string(GLOBAL_REGION_KEY, DEFAULT_REGION)
        return self.get_string("region", global_region)

    def availability_zones(self, region: str) -> list[str]:
        """<ns><region>.availabilityZones split on ',', default ["defaultZone"]."""
        return split_list(self.get_string(f"{region}.availabilityZones", DEFAULT_ZONE))

    def service_urls(self, zone: str) -> list[str]:
        """
        <ns>serviceUrl.<zone>; when absent or empty, <ns>serviceUrl.default;
        when that is absent too, an empty list.
        """
        urls = self.get_string(f"serviceUrl.{zone}")
        if not urls:
            urls = self.get_string("serviceUrl.default")
        if urls is None:
            return []
        return split_list(urls)


def load_resolver(
    settings: DiscoverySettings | None = None,
    overrides: MemoryPropertySource | None = None,
) -> ConfigResolver:
    """
    Resolver over the standard property stack, namespaced by
    settings.namespace (DISCOVERY_NAMESPACE).

        resolver = load_resolver()
        client_config = DefaultClientConfig(resolver)
    """
    settings = settings or get_settings()
    return ConfigResolver(load_property_source(settings, overrides), settings.namespace)


__all__ = [
    "DEFAULT_ZONE",
    "DEFAULT_REGION",
    "GLOBAL_REGION_KEY",
    "ConfigResolver",
    "load_resolver",
    "split_list",
]
