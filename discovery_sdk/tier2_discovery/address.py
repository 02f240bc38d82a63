"""
discovery_sdk.tier2_discovery.address
──────────────────────────────────────
Pick the address this instance advertises: walk an ordered list of metadata
key tokens and take the first non-empty value; otherwise fall back to a
host-provided default.

AddressResolver does no I/O and no retries. Metadata must already be
materialized on the DataCenterInfo; a lookup failure propagates to the
caller (the identity coordinator absorbs it).
"""
from __future__ import annotations

import socket
import threading
from collections.abc import Sequence
from typing import Callable, Protocol, runtime_checkable

from discovery_sdk.tier0_core.logging import get_logger
from discovery_sdk.tier2_discovery.datacenter import DataCenterInfo, MetadataKey

log = get_logger(__name__)

AddressResolutionOrder = tuple[str, ...]

DEFAULT_ADDRESS_RESOLUTION_ORDER: AddressResolutionOrder = (
    MetadataKey.PUBLIC_HOSTNAME.token,
    MetadataKey.LOCAL_IPV4.token,
)

DEFAULT_IP_ADDRESS_RESOLUTION_ORDER: AddressResolutionOrder = (
    MetadataKey.LOCAL_IPV4.token,
    MetadataKey.PUBLIC_IPV4.token,
)


# ── Host name fallback ────────────────────────────────────────────────────────

@runtime_checkable
class HostNameProvider(Protocol):
    """Default identity of the host when metadata yields nothing."""

    def get_host_name(self, force_refresh: bool = False) -> str: ...

    def get_ip_address(self, force_refresh: bool = False) -> str: ...


class LocalHostNameProvider:
    """
    Host name and IP from the local resolver, cached after first lookup.
    force_refresh=True recomputes. Lookups can hit DNS, so callers on the
    refresh path get the cached value unless they ask otherwise.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._host_name: str | None = None
        self._ip_address: str | None = None

    def get_host_name(self, force_refresh: bool = False) -> str:
        with self._lock:
            if force_refresh or self._host_name is None:
                self._host_name = socket.gethostname()
            return self._host_name

    def get_ip_address(self, force_refresh: bool = False) -> str:
        host_name = self.get_host_name(force_refresh)
        with self._lock:
            if force_refresh or self._ip_address is None:
                try:
                    self._ip_address = socket.gethostbyname(host_name)
                except OSError as exc:
                    log.warning("address.local_ip.unresolved", host_name=host_name, error=str(exc))
                    self._ip_address = "127.0.0.1"
            return self._ip_address


class StaticHostNameProvider:
    """Fixed host name and IP, for tests and hosts with a known identity."""

    def __init__(self, host_name: str, ip_address: str = "127.0.0.1") -> None:
        self.host_name = host_name
        self.ip_address = ip_address
        self.calls = 0

    def get_host_name(self, force_refresh: bool = False) -> str:
        self.calls += 1
        return self.host_name

    def get_ip_address(self, force_refresh: bool = False) -> str:
        self.calls += 1
        return self.ip_address


# ── Resolution ────────────────────────────────────────────────────────────────

class AddressResolver:
    def resolve(
        self,
        order: Sequence[str],
        data_center_info: DataCenterInfo,
        fallback: Callable[[], str],
    ) -> str:
        """
        First present, non-empty metadata value for the tokens in *order*.

        Returns fallback() when the data center has no metadata capability
        or no token yields a value. Tokens that name no known MetadataKey
        are skipped.
        """
        if not data_center_info.has_metadata_capability():
            return fallback()

        metadata = data_center_info.get_metadata()
        for token in order:
            key = MetadataKey.from_token(token)
            if key is None:
                log.warning("address.order.unknown_key", token=token)
                continue
            value = metadata.get(key.value)
            if value:
                return value
        return fallback()


def resolve_address(
    order: Sequence[str],
    data_center_info: DataCenterInfo,
    fallback: Callable[[], str],
) -> str:
    """Module-level shortcut for AddressResolver().resolve(...)."""
    return _resolver.resolve(order, data_center_info, fallback)


_resolver = AddressResolver()


__all__ = [
    "AddressResolutionOrder",
    "DEFAULT_ADDRESS_RESOLUTION_ORDER",
    "DEFAULT_IP_ADDRESS_RESOLUTION_ORDER",
    "HostNameProvider",
    "LocalHostNameProvider",
    "StaticHostNameProvider",
    "AddressResolver",
    "resolve_address",
]
