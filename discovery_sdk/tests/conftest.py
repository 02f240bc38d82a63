"""
discovery_sdk test configuration.

Everything runs in-process: in-memory property sources, hand-built metadata
mappings, frozen clocks. No network, no cloud metadata service.
"""
from __future__ import annotations

import os

import pytest

# ── Environment for all tests ─────────────────────────────────────────────
# Must be set before any discovery_sdk modules are imported.

os.environ.setdefault("DISCOVERY_LOG_LEVEL", "DEBUG")
os.environ.setdefault("DISCOVERY_LOG_FORMAT", "console")
os.environ.setdefault("DISCOVERY_APP_NAME", "test-service")
os.environ.setdefault("DISCOVERY_ENVIRONMENT", "test")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """Restore the default clock and settings cache after each test."""
    import discovery_sdk.tier0_core.config as _config
    import discovery_sdk.tier1_runtime.clock as _clock

    orig_clock = _clock._clock

    yield

    _clock._clock = orig_clock
    _config._reset_settings()


@pytest.fixture
def memory_source():
    """Empty in-memory property source."""
    from discovery_sdk.tier0_core.properties import MemoryPropertySource
    return MemoryPropertySource()


@pytest.fixture
def resolver(memory_source):
    """ConfigResolver over memory_source with the default "eureka." namespace."""
    from discovery_sdk.tier1_runtime.resolver import ConfigResolver
    return ConfigResolver(memory_source)


@pytest.fixture
def frozen_clock():
    from discovery_sdk.tier1_runtime.clock import Clock
    return Clock.frozen(1_700_000_000_000)


@pytest.fixture
def host_name_provider():
    """Fallback provider returning fixed values."""
    from discovery_sdk.tier2_discovery.address import StaticHostNameProvider
    return StaticHostNameProvider("dummyDefault", "192.168.0.1")


@pytest.fixture
def amazon_metadata():
    """Mutable metadata mapping, populated per test."""
    return {}


@pytest.fixture
def amazon_info(amazon_metadata):
    from discovery_sdk.tier2_discovery.datacenter import DataCenterInfo
    return DataCenterInfo.amazon(amazon_metadata)


@pytest.fixture
def coordinator_factory(resolver, host_name_provider, frozen_clock):
    """Build a coordinator around the shared resolver and fallback provider."""
    from discovery_sdk.tier2_discovery.identity import (
        IdentityRefreshCoordinator,
        InstanceIdentitySnapshot,
    )
    from discovery_sdk.tier2_discovery.instance_config import DefaultInstanceConfig

    def _build(
        data_center_info,
        host_name="initialValue",
        ip_addr="192.168.0.1",
        clock=None,
        address_resolver=None,
    ):
        return IdentityRefreshCoordinator(
            instance_config=DefaultInstanceConfig(resolver),
            data_center_info=data_center_info,
            host_name_provider=host_name_provider,
            initial=InstanceIdentitySnapshot(host_name=host_name, ip_addr=ip_addr),
            address_resolver=address_resolver,
            clock=clock or frozen_clock,
        )

    return _build
