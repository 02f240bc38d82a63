"""
discovery_sdk
─────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from discovery_sdk.tier0_core.logging import configure_logging, get_logger, log_context
from discovery_sdk.tier0_core.errors import (
    DiscoveryError,
    ConfigurationError,
    PropertySourceError,
    MetadataUnavailableError,
)
from discovery_sdk.tier0_core.config import get_settings, DiscoverySettings
from discovery_sdk.tier0_core.properties import (
    PropertySource,
    MemoryPropertySource,
    FilePropertySource,
    LayeredPropertySource,
    load_property_source,
)

from discovery_sdk.tier1_runtime.clock import Clock, get_clock, set_clock
from discovery_sdk.tier1_runtime.resolver import ConfigResolver, load_resolver, split_list
from discovery_sdk.tier1_runtime.scheduler import PeriodicRefresher

from discovery_sdk.tier2_discovery.datacenter import DataCenterInfo, DataCenterName, MetadataKey
from discovery_sdk.tier2_discovery.address import (
    AddressResolver,
    HostNameProvider,
    LocalHostNameProvider,
    StaticHostNameProvider,
    resolve_address,
)
from discovery_sdk.tier2_discovery.client_config import DefaultClientConfig
from discovery_sdk.tier2_discovery.instance_config import DefaultInstanceConfig
from discovery_sdk.tier2_discovery.identity import (
    IdentityRefreshCoordinator,
    InstanceIdentitySnapshot,
    RefreshState,
)

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger", "configure_logging", "log_context",
    # errors
    "DiscoveryError", "ConfigurationError", "PropertySourceError", "MetadataUnavailableError",
    # config
    "get_settings", "DiscoverySettings",
    # properties
    "PropertySource", "MemoryPropertySource", "FilePropertySource",
    "LayeredPropertySource", "load_property_source",
    # clock
    "Clock", "get_clock", "set_clock",
    # resolver
    "ConfigResolver", "load_resolver", "split_list",
    # scheduler
    "PeriodicRefresher",
    # datacenter
    "DataCenterInfo", "DataCenterName", "MetadataKey",
    # address
    "AddressResolver", "HostNameProvider", "LocalHostNameProvider",
    "StaticHostNameProvider", "resolve_address",
    # client & instance config
    "DefaultClientConfig", "DefaultInstanceConfig",
    # identity
    "IdentityRefreshCoordinator", "InstanceIdentitySnapshot", "RefreshState",
]
