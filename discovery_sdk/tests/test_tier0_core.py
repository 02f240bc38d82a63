"""Tests for tier0_core modules."""
from __future__ import annotations

import threading
import time

import pytest

from discovery_sdk.tier0_core.errors import (
    ConfigurationError,
    DiscoveryError,
    MetadataUnavailableError,
    PropertySourceError,
)
from discovery_sdk.tier0_core.properties import (
    DEPLOYMENT_ENVIRONMENT_KEY,
    FilePropertySource,
    LayeredPropertySource,
    MemoryPropertySource,
    PropertySource,
    load_property_source,
)


# ── errors ─────────────────────────────────────────────────────────────────

class TestErrors:
    def test_base_error_has_code_and_detail(self):
        e = DiscoveryError("Something broke")
        assert e.code == "discovery_error"
        assert "Something broke" in str(e)

    def test_subclass_codes(self):
        assert ConfigurationError().code == "configuration_error"
        assert MetadataUnavailableError().code == "metadata_unavailable"
        assert isinstance(PropertySourceError(), DiscoveryError)

    def test_explicit_code_overrides_class_code(self):
        e = ConfigurationError("bad", code="bad_namespace")
        assert e.code == "bad_namespace"

    def test_property_source_error_carries_path(self):
        e = PropertySourceError("unreadable", path="/etc/eureka-client.properties")
        assert e.path == "/etc/eureka-client.properties"
        assert e.to_dict()["error"]["path"] == "/etc/eureka-client.properties"

    def test_to_dict_includes_metadata(self):
        e = MetadataUnavailableError("no metadata", data_center="MyOwn")
        d = e.to_dict()
        assert d["error"]["code"] == "metadata_unavailable"
        assert d["error"]["data_center"] == "MyOwn"


# ── config ─────────────────────────────────────────────────────────────────

class TestSettings:
    def test_defaults(self, monkeypatch):
        from discovery_sdk.tier0_core.config import DiscoverySettings
        monkeypatch.delenv("DISCOVERY_ENVIRONMENT", raising=False)
        s = DiscoverySettings(_env_file=None)
        assert s.namespace == "eureka."
        assert s.props_name == "eureka-client"
        assert s.environment == "test"
        assert s.watch_enabled is False

    def test_reads_prefixed_env(self, monkeypatch):
        from discovery_sdk.tier0_core.config import get_settings, _reset_settings
        monkeypatch.setenv("DISCOVERY_NAMESPACE", "myclient.")
        monkeypatch.setenv("DISCOVERY_WATCH_INTERVAL_SECONDS", "2.5")
        _reset_settings()
        s = get_settings()
        assert s.namespace == "myclient."
        assert s.watch_interval_seconds == 2.5
        assert s.watch_enabled is True

    def test_invalid_namespace_raises_configuration_error(self, monkeypatch):
        from discovery_sdk.tier0_core.config import get_settings, _reset_settings
        monkeypatch.setenv("DISCOVERY_NAMESPACE", "eureka")
        _reset_settings()
        with pytest.raises(ConfigurationError):
            get_settings()

    def test_log_settings_are_normalized(self):
        from discovery_sdk.tier0_core.config import DiscoverySettings
        s = DiscoverySettings(_env_file=None, log_level="debug", log_format="CONSOLE")
        assert s.log_level == "DEBUG"
        assert s.log_format == "console"

    def test_invalid_log_level_raises_configuration_error(self, monkeypatch):
        from discovery_sdk.tier0_core.config import get_settings, _reset_settings
        monkeypatch.setenv("DISCOVERY_LOG_LEVEL", "chatty")
        _reset_settings()
        with pytest.raises(ConfigurationError):
            get_settings()

    def test_settings_are_cached(self):
        from discovery_sdk.tier0_core.config import get_settings
        assert get_settings() is get_settings()


# ── properties ─────────────────────────────────────────────────────────────

class TestMemoryPropertySource:
    def test_satisfies_protocol(self):
        assert isinstance(MemoryPropertySource(), PropertySource)

    def test_get_missing_returns_default(self):
        source = MemoryPropertySource()
        assert source.get("eureka.region") is None
        assert source.get("eureka.region", "us-west-2") == "us-west-2"

    def test_set_update_remove_clear(self):
        source = MemoryPropertySource({"a": "1"})
        source.set("b", "2")
        source.update({"c": "3", "a": "10"})
        assert source.as_dict() == {"a": "10", "b": "2", "c": "3"}
        source.remove("b")
        source.remove("does-not-exist")
        assert source.get("b") is None
        source.clear()
        assert source.as_dict() == {}

    def test_concurrent_writers_do_not_lose_keys(self):
        source = MemoryPropertySource()

        def writer(prefix: str) -> None:
            for i in range(200):
                source.set(f"{prefix}.{i}", str(i))

        threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(source.as_dict()) == 800


class TestFilePropertySource:
    def test_missing_files_are_not_an_error(self, tmp_path):
        source = FilePropertySource("eureka-client", "test", tmp_path)
        assert source.get("eureka.region") is None
        assert source.get(DEPLOYMENT_ENVIRONMENT_KEY) == "test"

    def test_environment_file_overrides_base(self, tmp_path):
        (tmp_path / "eureka-client.properties").write_text(
            "eureka.region=us-east-1\neureka.serviceUrl.default=http://a,http://b\n"
        )
        (tmp_path / "eureka-client-prod.properties").write_text("eureka.region=eu-west-1\n")
        source = FilePropertySource("eureka-client", "prod", tmp_path)
        assert source.get("eureka.region") == "eu-west-1"
        assert source.get("eureka.serviceUrl.default") == "http://a,http://b"
        assert source.get(DEPLOYMENT_ENVIRONMENT_KEY) == "prod"

    def test_values_are_not_interpolated(self, tmp_path):
        (tmp_path / "eureka-client.properties").write_text("eureka.dollarReplacement=${HOME}\n")
        source = FilePropertySource("eureka-client", "test", tmp_path)
        assert source.get("eureka.dollarReplacement") == "${HOME}"

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / "eureka-client.properties"
        path.write_text("eureka.region=us-east-1\n")
        source = FilePropertySource("eureka-client", "test", tmp_path)
        assert source.reload() is False

        path.write_text("eureka.region=us-west-2\n")
        assert source.reload() is True
        assert source.get("eureka.region") == "us-west-2"

    def test_unreadable_file_raises(self, tmp_path):
        (tmp_path / "eureka-client.properties").write_bytes(b"eureka.region=\xff\xfe\n")
        with pytest.raises(PropertySourceError) as exc_info:
            FilePropertySource("eureka-client", "test", tmp_path)
        assert exc_info.value.path.endswith("eureka-client.properties")

    def test_watch_reloads_on_file_change(self, tmp_path):
        path = tmp_path / "eureka-client.properties"
        path.write_text("eureka.region=us-east-1\n")
        source = FilePropertySource("eureka-client", "test", tmp_path)
        source.watch(0.05)
        try:
            path.write_text("eureka.region=ap-south-1\n")
            deadline = time.monotonic() + 5
            while source.get("eureka.region") != "ap-south-1" and time.monotonic() < deadline:
                time.sleep(0.01)
            assert source.get("eureka.region") == "ap-south-1"
        finally:
            source.close()

    def test_watch_picks_up_new_environment_file(self, tmp_path):
        source = FilePropertySource("eureka-client", "prod", tmp_path)
        source.watch(0.05)
        try:
            (tmp_path / "eureka-client-prod.properties").write_text("eureka.region=eu-west-1\n")
            deadline = time.monotonic() + 5
            while source.get("eureka.region") != "eu-west-1" and time.monotonic() < deadline:
                time.sleep(0.01)
            assert source.get("eureka.region") == "eu-west-1"
        finally:
            source.close()

    def test_watch_ignores_missing_config_dir(self, tmp_path):
        source = FilePropertySource("eureka-client", "test", tmp_path / "absent")
        source.watch(0.05)
        source.close()
        assert source.get("eureka.region") is None

    def test_watch_rejects_non_positive_interval(self, tmp_path):
        source = FilePropertySource("eureka-client", "test", tmp_path)
        with pytest.raises(ValueError):
            source.watch(0)

    def test_close_is_idempotent(self, tmp_path):
        source = FilePropertySource("eureka-client", "test", tmp_path)
        source.close()
        source.close()


class TestLayeredPropertySource:
    def test_first_source_wins(self):
        top = MemoryPropertySource({"eureka.region": "eu-west-1"})
        bottom = MemoryPropertySource({"eureka.region": "us-east-1", "eureka.port": "8080"})
        layered = LayeredPropertySource([top, bottom])
        assert layered.get("eureka.region") == "eu-west-1"
        assert layered.get("eureka.port") == "8080"
        assert layered.get("eureka.missing", "fallback") == "fallback"

    def test_empty_string_in_top_layer_shadows_lower_layers(self):
        layered = LayeredPropertySource([
            MemoryPropertySource({"eureka.serviceUrl.default": ""}),
            MemoryPropertySource({"eureka.serviceUrl.default": "http://a"}),
        ])
        assert layered.get("eureka.serviceUrl.default") == ""

    def test_load_property_source_layers_overrides_over_files(self, tmp_path):
        from discovery_sdk.tier0_core.config import DiscoverySettings
        (tmp_path / "eureka-client.properties").write_text("eureka.region=us-east-1\n")
        settings = DiscoverySettings(_env_file=None, config_dir=str(tmp_path))
        overrides = MemoryPropertySource()
        source = load_property_source(settings, overrides=overrides)
        try:
            assert source.get("eureka.region") == "us-east-1"
            overrides.set("eureka.region", "us-west-1")
            assert source.get("eureka.region") == "us-west-1"
            assert isinstance(source.sources[1], FilePropertySource)
        finally:
            source.close()


# ── logging ────────────────────────────────────────────────────────────────

class TestLogging:
    def test_redacts_proxy_password(self):
        from discovery_sdk.tier0_core.logging import _redact_processor
        event = {"event": "config.loaded", "proxy_password": "hunter2", "proxy_host": "proxy"}
        result = _redact_processor(None, "info", event)
        assert result["proxy_password"] == "[REDACTED]"
        assert result["proxy_host"] == "proxy"

    def test_get_logger_returns_bound_logger(self):
        from discovery_sdk.tier0_core.logging import get_logger
        log = get_logger("discovery_sdk.tests")
        log.info("tests.logging.smoke", key="value")

    def test_log_context_is_scoped_to_the_block(self):
        import structlog
        from discovery_sdk.tier0_core.logging import log_context
        with log_context(data_center="Amazon"):
            assert structlog.contextvars.get_contextvars()["data_center"] == "Amazon"
        assert "data_center" not in structlog.contextvars.get_contextvars()

    def test_level_and_format_come_from_settings(self):
        import io
        import json
        import logging
        from discovery_sdk.tier0_core.config import DiscoverySettings
        from discovery_sdk.tier0_core.logging import LOGGER_NAME, configure_logging, get_logger

        stream = io.StringIO()
        settings = DiscoverySettings(_env_file=None, log_level="warning", log_format="json")
        configure_logging(settings, stream=stream)
        try:
            log = get_logger("discovery_sdk.tests")
            log.info("tests.logging.filtered")
            log.warning("tests.logging.kept", proxy_password="hunter2")
            lines = [json.loads(line) for line in stream.getvalue().splitlines()]
            assert [line["event"] for line in lines] == ["tests.logging.kept"]
            assert lines[0]["proxy_password"] == "[REDACTED]"
            assert logging.getLogger(LOGGER_NAME).level == logging.WARNING
        finally:
            configure_logging()

    def test_sdk_logger_does_not_propagate_to_root(self):
        import logging
        from discovery_sdk.tier0_core.logging import LOGGER_NAME, get_logger
        get_logger("discovery_sdk.tests")
        sdk_logger = logging.getLogger(LOGGER_NAME)
        assert sdk_logger.propagate is False
        assert len(sdk_logger.handlers) == 1

    def test_reconfiguring_replaces_the_handler(self):
        import logging
        from discovery_sdk.tier0_core.logging import LOGGER_NAME, configure_logging
        configure_logging()
        configure_logging()
        assert len(logging.getLogger(LOGGER_NAME).handlers) == 1


# ── metrics ────────────────────────────────────────────────────────────────

class TestMetrics:
    def _value(self, name: str, **labels: str) -> float:
        from prometheus_client import REGISTRY
        from discovery_sdk.tier0_core.metrics import _DEFAULT_LABEL_VALUES
        return REGISTRY.get_sample_value(name, {**_DEFAULT_LABEL_VALUES, **labels}) or 0.0

    def test_counter_applies_standard_labels(self):
        from discovery_sdk.tier0_core.metrics import property_reload_total
        before = self._value("discovery_property_reload_total", result="changed")
        property_reload_total(result="changed").inc()
        assert self._value("discovery_property_reload_total", result="changed") == before + 1

    def test_skipped_refresh_is_counted(self, coordinator_factory):
        from discovery_sdk.tier2_discovery.datacenter import DataCenterInfo
        before = self._value("discovery_identity_refresh_total", outcome="skipped")
        coordinator_factory(DataCenterInfo.generic()).refresh_if_required()
        assert self._value("discovery_identity_refresh_total", outcome="skipped") == before + 1
