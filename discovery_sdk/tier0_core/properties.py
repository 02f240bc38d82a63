"""
discovery_sdk.tier0_core.properties
────────────────────────────────────
Live key → value property stores read by ConfigResolver. Sources are passed
in explicitly; nothing here is a process-wide global.

  - MemoryPropertySource   in-memory, mutable at runtime (overrides, tests)
  - FilePropertySource     cascaded key=value files, reloadable and watchable
  - LayeredPropertySource  first source holding a key wins

File cascade (for props_name="eureka-client", environment="prod"):
  <config_dir>/eureka-client.properties
  <config_dir>/eureka-client-prod.properties   (overrides the first)

Each source is responsible for its own consistency under reload: a reload
builds a complete new mapping and swaps it in with a single assignment, so a
concurrent reader sees either the old or the new state, never a mix.

Minimal stack: python-dotenv (key=value parsing), watchdog (file change events)
"""
from __future__ import annotations

import os
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from dotenv import dotenv_values
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from discovery_sdk.tier0_core.config import DiscoverySettings, get_settings
from discovery_sdk.tier0_core.errors import PropertySourceError
from discovery_sdk.tier0_core.logging import get_logger
from discovery_sdk.tier0_core.metrics import property_reload_total

log = get_logger(__name__)

DEPLOYMENT_ENVIRONMENT_KEY = "archaius.deployment.environment"

_MISSING = object()


# ── Protocol ──────────────────────────────────────────────────────────────────

@runtime_checkable
class PropertySource(Protocol):
    """Implement this protocol to add a new property backend. Must be thread-safe."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the raw value stored under *key*, or *default* when absent."""
        ...


# ── In-memory source ──────────────────────────────────────────────────────────

class MemoryPropertySource:
    """Thread-safe mutable store. Writers serialize on a lock; reads are lock-free."""

    def __init__(self, properties: Mapping[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._props: dict[str, Any] = dict(properties or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._props.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            props = dict(self._props)
            props[key] = value
            self._props = props

    def remove(self, key: str) -> None:
        with self._lock:
            props = dict(self._props)
            props.pop(key, None)
            self._props = props

    def update(self, properties: Mapping[str, Any]) -> None:
        with self._lock:
            props = dict(self._props)
            props.update(properties)
            self._props = props

    def clear(self) -> None:
        with self._lock:
            self._props = {}

    def as_dict(self) -> dict[str, Any]:
        return dict(self._props)


# ── File source ───────────────────────────────────────────────────────────────

class FilePropertySource:
    """
    Cascaded property files with reload and an optional watchdog observer.

    Missing files are not an error: the base file logs a warning (the client
    may be configured entirely through overrides), the environment file is
    optional. A file that exists but cannot be read raises PropertySourceError.
    """

    def __init__(
        self,
        props_name: str = "eureka-client",
        environment: str = "test",
        config_dir: str | Path = ".",
    ) -> None:
        base = Path(config_dir)
        self._environment = environment
        self._base_path = base / f"{props_name}.properties"
        self._env_path = base / f"{props_name}-{environment}.properties"
        self._props: dict[str, str] = {}
        self._reload_lock = threading.Lock()
        self._observer: BaseObserver | None = None
        self.reload()

    @property
    def paths(self) -> tuple[Path, Path]:
        return (self._base_path, self._env_path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._props.get(key, default)

    def reload(self) -> bool:
        """Re-read all files. Returns True if the effective mapping changed."""
        with self._reload_lock:
            merged: dict[str, str] = {DEPLOYMENT_ENVIRONMENT_KEY: self._environment}
            for path in self.paths:
                merged.update(self._read(path))
            changed = merged != self._props
            self._props = merged
        log.debug("properties.reloaded", changed=changed, keys=len(merged))
        return changed

    def _read(self, path: Path) -> dict[str, str]:
        if not path.is_file():
            if path == self._base_path:
                log.warning(
                    "properties.file.missing",
                    path=str(path),
                    hint="may be okay if the configuration is installed with a different mechanism",
                )
            return {}
        try:
            values = dotenv_values(path, interpolate=False, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PropertySourceError(
                f"Cannot read property file {path}: {exc}", path=str(path)
            ) from exc
        return {k: v for k, v in values.items() if v is not None}

    # ── Watching ──────────────────────────────────────────────────────────────

    def watch(self, interval_seconds: float) -> None:
        """
        Reload when either property file is written, created, moved into
        place or deleted. *interval_seconds* is the observer's event timeout.
        A config_dir that does not exist cannot be watched and logs a warning.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if self._observer is not None:
            return
        directory = self._base_path.parent
        if not directory.is_dir():
            log.warning("properties.watch.unavailable", path=str(directory))
            return
        observer = Observer(timeout=interval_seconds)
        observer.schedule(_PropertyFileHandler(self), str(directory), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        log.info("properties.watch.started", path=str(directory), interval_seconds=interval_seconds)

    def _on_file_event(self) -> None:
        try:
            changed = self.reload()
        except PropertySourceError as exc:
            # Keep serving the last good mapping; the next write retries.
            property_reload_total(result="failed").inc()
            log.error("properties.reload.failed", code=exc.code, detail=exc.detail, **exc.metadata)
            return
        property_reload_total(result="changed" if changed else "unchanged").inc()

    def close(self) -> None:
        """Stop the watcher, if any. Safe to call more than once."""
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)


class _PropertyFileHandler(FileSystemEventHandler):
    """Forward events on the two cascade files of one FilePropertySource."""

    def __init__(self, source: FilePropertySource) -> None:
        self._source = source
        self._names = {path.name for path in source.paths}

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        touched = {os.fsdecode(event.src_path), os.fsdecode(getattr(event, "dest_path", "") or "")}
        if any(Path(p).name in self._names for p in touched if p):
            self._source._on_file_event()


# ── Layering ──────────────────────────────────────────────────────────────────

class LayeredPropertySource:
    """Ordered stack of sources. The first source that holds a key wins."""

    def __init__(self, sources: Sequence[PropertySource]) -> None:
        self._sources = tuple(sources)

    @property
    def sources(self) -> tuple[PropertySource, ...]:
        return self._sources

    def get(self, key: str, default: Any = None) -> Any:
        for source in self._sources:
            value = source.get(key, _MISSING)
            if value is not _MISSING:
                return value
        return default

    def close(self) -> None:
        for source in self._sources:
            close = getattr(source, "close", None)
            if callable(close):
                close()


# ── Factory ───────────────────────────────────────────────────────────────────

def load_property_source(
    settings: DiscoverySettings | None = None,
    overrides: MemoryPropertySource | None = None,
) -> LayeredPropertySource:
    """
    Build the standard stack: runtime overrides on top of cascaded files.
    Starts the file observer when settings.watch_interval_seconds > 0.
    """
    settings = settings or get_settings()
    files = FilePropertySource(
        props_name=settings.props_name,
        environment=settings.environment,
        config_dir=settings.config_dir,
    )
    if settings.watch_enabled:
        files.watch(settings.watch_interval_seconds)
    return LayeredPropertySource([overrides or MemoryPropertySource(), files])


__all__ = [
    "DEPLOYMENT_ENVIRONMENT_KEY",
    "PropertySource",
    "MemoryPropertySource",
    "FilePropertySource",
    "LayeredPropertySource",
    "load_property_source",
]
