"""
discovery_sdk.tier2_discovery.instance_config
──────────────────────────────────────────────
Instance-side properties read by the identity coordinator: the metadata key
orders used to pick the advertised host name and IP.

    eureka.defaultAddressResolutionOrder=publicHostname,localIpv4
    eureka.ipAddressResolutionOrder=localIpv4,publicIpv4

Unset or empty means the built-in default order.
"""
from __future__ import annotations

from discovery_sdk.tier1_runtime.resolver import ConfigResolver, split_list
from discovery_sdk.tier2_discovery.address import (
    DEFAULT_ADDRESS_RESOLUTION_ORDER,
    DEFAULT_IP_ADDRESS_RESOLUTION_ORDER,
    AddressResolutionOrder,
)

ADDRESS_RESOLUTION_ORDER_KEY = "defaultAddressResolutionOrder"
IP_ADDRESS_RESOLUTION_ORDER_KEY = "ipAddressResolutionOrder"


class DefaultInstanceConfig:
    def __init__(self, resolver: ConfigResolver) -> None:
        self._resolver = resolver

    @property
    def resolver(self) -> ConfigResolver:
        return self._resolver

    def default_address_resolution_order(self) -> AddressResolutionOrder:
        return self._order(ADDRESS_RESOLUTION_ORDER_KEY, DEFAULT_ADDRESS_RESOLUTION_ORDER)

    def ip_address_resolution_order(self) -> AddressResolutionOrder:
        return self._order(IP_ADDRESS_RESOLUTION_ORDER_KEY, DEFAULT_IP_ADDRESS_RESOLUTION_ORDER)

    def _order(self, suffix: str, default: AddressResolutionOrder) -> AddressResolutionOrder:
        raw = self._resolver.get_string(suffix)
        if not raw:
            return default
        return tuple(split_list(raw))


__all__ = [
    "ADDRESS_RESOLUTION_ORDER_KEY",
    "IP_ADDRESS_RESOLUTION_ORDER_KEY",
    "DefaultInstanceConfig",
]
