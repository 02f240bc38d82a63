"""
discovery_sdk.tier2_discovery.identity
───────────────────────────────────────
Keeps this instance's advertised identity (host name, IP) in step with the
data center's host metadata.

    coordinator = IdentityRefreshCoordinator(
        instance_config=DefaultInstanceConfig(resolver),
        data_center_info=DataCenterInfo.amazon(metadata),
        host_name_provider=LocalHostNameProvider(),
        initial=InstanceIdentitySnapshot(host_name="i-123.local", ip_addr="10.0.0.5"),
    )
    coordinator.add_listener(lambda previous, current: replicator.on_demand_update())
    coordinator.refresh_if_required()

Refresh cycle: Idle → Refreshing → Updated | Unchanged → Idle.

Metadata is read outside any lock. The compare-and-update of the four
identity fields is the only critical section, and readers take a frozen copy
under the same lock, so nobody ever sees fields from different refreshes.
Every refresh takes a sequence number before it reads metadata; a result
whose number is older than the last one applied is discarded, so a slow
refresh can never put back an identity a newer refresh already replaced.
last_updated_at never decreases. Listeners run after the lock is released.

A refresh never raises. Metadata or host-name lookup failures are logged,
counted, and reported as Unchanged; the next scheduled refresh retries.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from discovery_sdk.tier0_core.logging import get_logger, log_context
from discovery_sdk.tier0_core.metrics import identity_last_updated_ms, identity_refresh_total
from discovery_sdk.tier1_runtime.clock import Clock, get_clock
from discovery_sdk.tier2_discovery.address import AddressResolver, HostNameProvider
from discovery_sdk.tier2_discovery.datacenter import DataCenterInfo
from discovery_sdk.tier2_discovery.instance_config import DefaultInstanceConfig

log = get_logger(__name__)


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class InstanceIdentitySnapshot:
    """Point-in-time copy of the advertised identity. last_updated_at is epoch ms."""
    host_name: str
    ip_addr: str
    last_updated_at: int = 0
    dirty: bool = False


IdentityListener = Callable[[InstanceIdentitySnapshot, InstanceIdentitySnapshot], None]


class IdentityRefreshCoordinator:
    def __init__(
        self,
        instance_config: DefaultInstanceConfig,
        data_center_info: DataCenterInfo,
        host_name_provider: HostNameProvider,
        initial: InstanceIdentitySnapshot,
        address_resolver: AddressResolver | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._instance_config = instance_config
        self._data_center_info = data_center_info
        self._host_name_provider = host_name_provider
        self._address_resolver = address_resolver or AddressResolver()
        self._clock = clock or get_clock()

        # Identity fields. Guarded by _lock; mutated only in _apply and clear_dirty.
        self._lock = threading.Lock()
        self._host_name = initial.host_name
        self._ip_addr = initial.ip_addr
        self._last_updated_at = initial.last_updated_at
        self._dirty = initial.dirty
        self._applied_seq = 0

        self._listeners: list[IdentityListener] = []
        self._listeners_lock = threading.Lock()
        self._in_flight = 0
        self._next_seq = 0
        self._state_lock = threading.Lock()
        self.last_outcome: RefreshState | None = None

    @property
    def data_center_info(self) -> DataCenterInfo:
        return self._data_center_info

    @property
    def state(self) -> RefreshState:
        return RefreshState.REFRESHING if self._in_flight else RefreshState.IDLE

    def snapshot(self) -> InstanceIdentitySnapshot:
        """Consistent copy of the current identity."""
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> InstanceIdentitySnapshot:
        return InstanceIdentitySnapshot(
            host_name=self._host_name,
            ip_addr=self._ip_addr,
            last_updated_at=self._last_updated_at,
            dirty=self._dirty,
        )

    # ── Listeners ─────────────────────────────────────────────────────────────

    def add_listener(self, listener: IdentityListener) -> None:
        """Call *listener(previous, current)* after every identity change."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: IdentityListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, previous: InstanceIdentitySnapshot, current: InstanceIdentitySnapshot) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(previous, current)
            except Exception:
                log.exception("identity.listener.failed", listener=repr(listener))

    # ── Refresh ───────────────────────────────────────────────────────────────

    def refresh_if_required(self) -> bool:
        """Refresh from host metadata. True iff the identity changed."""
        return self.refresh() is RefreshState.UPDATED

    def refresh(self) -> RefreshState:
        if not self._data_center_info.has_metadata_capability():
            identity_refresh_total(outcome="skipped").inc()
            self.last_outcome = RefreshState.UNCHANGED
            return RefreshState.UNCHANGED

        seq = self._enter()
        try:
            with log_context(data_center=self._data_center_info.name.value):
                outcome = self._refresh(seq)
        finally:
            self._exit()
        self.last_outcome = outcome
        return outcome

    def _refresh(self, seq: int) -> RefreshState:
        try:
            host_name, ip_addr = self._resolve_candidates()
        except Exception as exc:
            identity_refresh_total(outcome="failed").inc()
            log.warning("identity.refresh.failed", error=repr(exc))
            return RefreshState.UNCHANGED

        changed = self._apply(seq, host_name, ip_addr)
        if changed is None:
            identity_refresh_total(outcome="unchanged").inc()
            log.debug("identity.refresh.unchanged", host_name=host_name, ip_addr=ip_addr)
            return RefreshState.UNCHANGED

        previous, current = changed
        identity_refresh_total(outcome="updated").inc()
        identity_last_updated_ms().set(current.last_updated_at)
        log.info(
            "identity.refresh.updated",
            previous_host_name=previous.host_name,
            previous_ip_addr=previous.ip_addr,
            host_name=current.host_name,
            ip_addr=current.ip_addr,
        )
        self._notify(previous, current)
        return RefreshState.UPDATED

    def _resolve_candidates(self) -> tuple[str, str]:
        host_order = self._instance_config.default_address_resolution_order()
        ip_order = self._instance_config.ip_address_resolution_order()
        provider = self._host_name_provider
        host_name = self._address_resolver.resolve(
            host_order, self._data_center_info, lambda: provider.get_host_name(False)
        )
        ip_addr = self._address_resolver.resolve(
            ip_order, self._data_center_info, lambda: provider.get_ip_address(False)
        )
        return host_name, ip_addr

    def _apply(
        self, seq: int, host_name: str, ip_addr: str
    ) -> tuple[InstanceIdentitySnapshot, InstanceIdentitySnapshot] | None:
        """
        Compare-and-update under the lock. Returns (previous, current) on
        change; None when the candidates match or a newer refresh already
        applied.
        """
        with self._lock:
            if seq < self._applied_seq:
                return None
            self._applied_seq = seq
            if host_name == self._host_name and ip_addr == self._ip_addr:
                return None
            previous = self._snapshot_locked()
            self._host_name = host_name
            self._ip_addr = ip_addr
            self._dirty = True
            self._last_updated_at = max(self._clock.now_ms(), self._last_updated_at)
            return previous, self._snapshot_locked()

    def _enter(self) -> int:
        with self._state_lock:
            self._in_flight += 1
            self._next_seq += 1
            return self._next_seq

    def _exit(self) -> None:
        with self._state_lock:
            self._in_flight -= 1

    # ── Dirty flag ────────────────────────────────────────────────────────────

    def clear_dirty(self, as_of: int | None = None) -> bool:
        """
        Acknowledge that the identity has been published.

        With *as_of* (epoch ms of the snapshot that was published), the flag
        is only cleared when no change happened after it. Returns True if the
        flag was cleared.
        """
        with self._lock:
            if not self._dirty:
                return False
            if as_of is not None and self._last_updated_at > as_of:
                return False
            self._dirty = False
            return True


__all__ = [
    "RefreshState",
    "InstanceIdentitySnapshot",
    "IdentityListener",
    "IdentityRefreshCoordinator",
]
