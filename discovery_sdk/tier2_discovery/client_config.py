"""
discovery_sdk.tier2_discovery.client_config
────────────────────────────────────────────
Typed getters for every client-side property. Each getter resolves at call
time, so hot-reloaded values are picked up on the next read.

Keys are <namespace><suffix>; with the default namespace "eureka." the
registry fetch interval lives at "eureka.client.refresh.interval".
"""
from __future__ import annotations

from discovery_sdk.tier1_runtime.resolver import ConfigResolver

DEFAULT_EXECUTOR_THREAD_POOL_SIZE = 5
DEFAULT_CLIENT_DATA_ACCEPT = "full"


class DefaultClientConfig:
    def __init__(self, resolver: ConfigResolver) -> None:
        self._resolver = resolver

    @property
    def resolver(self) -> ConfigResolver:
        return self._resolver

    # ── Intervals ─────────────────────────────────────────────────────────────

    def registry_fetch_interval_seconds(self) -> int:
        return self._resolver.get_int("client.refresh.interval", 30)

    def instance_info_replication_interval_seconds(self) -> int:
        return self._resolver.get_int("appinfo.replicate.interval", 30)

    def initial_instance_info_replication_interval_seconds(self) -> int:
        return self._resolver.get_int("appinfo.initial.replicate.time", 40)

    def eureka_service_url_poll_interval_seconds(self) -> int:
        # Stored in milliseconds.
        return self._resolver.get_int("serviceUrlPollIntervalMs", 5 * 60 * 1000) // 1000

    # ── Proxy ─────────────────────────────────────────────────────────────────

    def proxy_host(self) -> str | None:
        return self._resolver.get_string("eurekaServer.proxyHost")

    def proxy_port(self) -> str | None:
        return self._resolver.get_string("eurekaServer.proxyPort")

    def proxy_user_name(self) -> str | None:
        return self._resolver.get_string("eurekaServer.proxyUserName")

    def proxy_password(self) -> str | None:
        return self._resolver.get_string("eurekaServer.proxyPassword")

    # ── Server transport ──────────────────────────────────────────────────────

    def should_gzip_content(self) -> bool:
        return self._resolver.get_bool("eurekaServer.gzipContent", True)

    def eureka_server_read_timeout_seconds(self) -> int:
        return self._resolver.get_int("eurekaServer.readTimeout", 8)

    def eureka_server_connect_timeout_seconds(self) -> int:
        return self._resolver.get_int("eurekaServer.connectTimeout", 5)

    def eureka_server_total_connections(self) -> int:
        return self._resolver.get_int("eurekaServer.maxTotalConnections", 200)

    def eureka_server_total_connections_per_host(self) -> int:
        return self._resolver.get_int("eurekaServer.maxConnectionsPerHost", 50)

    def eureka_connection_idle_timeout_seconds(self) -> int:
        # Lower-case "eurekaserver" is the historical key.
        return self._resolver.get_int("eurekaserver.connectionIdleTimeoutInSeconds", 30)

    def allow_redirects(self) -> bool:
        return self._resolver.get_bool("allowRedirects", False)

    # ── Server location ───────────────────────────────────────────────────────

    def eureka_server_url_context(self) -> str | None:
        return self._resolver.get_string_with_fallback("eurekaServer.context", "context")

    def eureka_server_port(self) -> str | None:
        return self._resolver.get_string_with_fallback("eurekaServer.port", "port")

    def eureka_server_dns_name(self) -> str | None:
        return self._resolver.get_string_with_fallback("eurekaServer.domainName", "domainName")

    def should_use_dns_for_fetching_service_urls(self) -> bool:
        return self._resolver.get_bool("shouldUseDns", False)

    def region(self) -> str:
        return self._resolver.region()

    def availability_zones(self, region: str) -> list[str]:
        return self._resolver.availability_zones(region)

    def eureka_server_service_urls(self, zone: str) -> list[str]:
        return self._resolver.service_urls(zone)

    def should_prefer_same_zone_eureka(self) -> bool:
        return self._resolver.get_bool("preferSameZone", True)

    # ── Registration & registry fetch ─────────────────────────────────────────

    def should_register_with_eureka(self) -> bool:
        return self._resolver.get_bool("registration.enabled", True)

    def should_fetch_registry(self) -> bool:
        return self._resolver.get_bool("shouldFetchRegistry", True)

    def should_disable_delta(self) -> bool:
        return self._resolver.get_bool("disableDelta", False)

    def should_log_delta_diff(self) -> bool:
        return self._resolver.get_bool("printDeltaFullDiff", False)

    def should_filter_only_up_instances(self) -> bool:
        return self._resolver.get_bool("shouldFilterOnlyUpInstances", True)

    def should_on_demand_update_status_change(self) -> bool:
        return self._resolver.get_bool("shouldOnDemandUpdateStatusChange", True)

    def fetch_registry_for_remote_regions(self) -> str | None:
        return self._resolver.get_string("fetchRemoteRegionsRegistry")

    def registry_refresh_single_vip_address(self) -> str | None:
        return self._resolver.get_string("registryRefreshSingleVipAddress")

    def backup_registry_impl(self) -> str | None:
        return self._resolver.get_string("backupregistry")

    def read_cluster_app_name(self) -> str | None:
        return self._resolver.get_string("readClusterAppName")

    # ── Executors ─────────────────────────────────────────────────────────────

    def heartbeat_executor_thread_pool_size(self) -> int:
        return self._resolver.get_int(
            "client.heartbeat.threadPoolSize", DEFAULT_EXECUTOR_THREAD_POOL_SIZE
        )

    def heartbeat_executor_exponential_back_off_bound(self) -> int:
        return self._resolver.get_int("client.heartbeat.exponentialBackOffBound", 10)

    def cache_refresh_executor_thread_pool_size(self) -> int:
        return self._resolver.get_int(
            "client.cacheRefresh.threadPoolSize", DEFAULT_EXECUTOR_THREAD_POOL_SIZE
        )

    def cache_refresh_executor_exponential_back_off_bound(self) -> int:
        return self._resolver.get_int("client.cacheRefresh.exponentialBackOffBound", 10)

    # ── Serialization ─────────────────────────────────────────────────────────

    def dollar_replacement(self) -> str:
        return self._resolver.get_string("dollarReplacement", "_-")

    def escape_char_replacement(self) -> str:
        return self._resolver.get_string("escapeCharReplacement", "__")

    def encoder_name(self) -> str | None:
        return self._resolver.get_string("encoderName")

    def decoder_name(self) -> str | None:
        return self._resolver.get_string("decoderName")

    def client_data_accept(self) -> str:
        return self._resolver.get_string("clientDataAccept", DEFAULT_CLIENT_DATA_ACCEPT)

    def experimental(self, name: str) -> str | None:
        return self._resolver.get_string(f"experimental.{name}")


__all__ = [
    "DEFAULT_EXECUTOR_THREAD_POOL_SIZE",
    "DEFAULT_CLIENT_DATA_ACCEPT",
    "DefaultClientConfig",
]
