"""
discovery_sdk.tier1_runtime.scheduler
──────────────────────────────────────
Background re-run of a periodic task on a daemon thread.

Intervals are callables, re-read before every sleep, so a hot-reloaded
property takes effect on the next cycle without restarting the thread.
A failing run is logged and the loop continues; the next cycle retries.

Usage:
    client_config = DefaultClientConfig(load_resolver())
    refresher = PeriodicRefresher(
        coordinator.refresh_if_required,
        interval_fn=client_config.instance_info_replication_interval_seconds,
        initial_delay_fn=client_config.initial_instance_info_replication_interval_seconds,
    )
    refresher.start()
    ...
    refresher.stop()
"""
from __future__ import annotations

import threading
from typing import Any, Callable

from discovery_sdk.tier0_core.logging import get_logger, log_context

log = get_logger(__name__)

_FALLBACK_INTERVAL_SECONDS = 1.0


class PeriodicRefresher:
    def __init__(
        self,
        task: Callable[[], Any],
        interval_fn: Callable[[], float],
        initial_delay_fn: Callable[[], float] | None = None,
        name: str = "discovery-refresh",
    ) -> None:
        self._task = task
        self._interval_fn = interval_fn
        self._initial_delay_fn = initial_delay_fn or interval_fn
        self._name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self.runs = 0

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start the background thread. No-op if already running."""
        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
            self._thread.start()
        log.info("scheduler.started", name=self._name)

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the thread to exit and wait for it. Safe to call more than once."""
        self._stop.set()
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            log.info("scheduler.stopped", name=self._name, runs=self.runs)

    def run_once(self) -> None:
        """Run the task on the calling thread, logging any failure."""
        self.runs += 1
        with log_context(refresher=self._name):
            try:
                self._task()
            except Exception:
                log.exception("scheduler.task.failed", name=self._name)

    def _loop(self) -> None:
        delay = self._delay(self._initial_delay_fn)
        while not self._stop.wait(delay):
            self.run_once()
            delay = self._delay(self._interval_fn)

    def _delay(self, fn: Callable[[], float]) -> float:
        try:
            seconds = float(fn())
        except Exception:
            log.exception("scheduler.interval.failed", name=self._name)
            return _FALLBACK_INTERVAL_SECONDS
        if seconds <= 0:
            log.warning("scheduler.interval.invalid", name=self._name, seconds=seconds)
            return _FALLBACK_INTERVAL_SECONDS
        return seconds


__all__ = ["PeriodicRefresher"]
