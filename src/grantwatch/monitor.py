"""The monitoring loop: collect → diff → persist, once per interval.

The monitor owns the previous snapshot and is the only place that decides
whether a failure is logged and skipped. A failed collection leaves both the
in-memory snapshot and the state file untouched; a failed save keeps the new
snapshot in memory for the next cycle.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from grantwatch.adapters._base import DatabaseAdapter
from grantwatch.collector import CollectionError, collect
from grantwatch.diff import Delta, diff
from grantwatch.privileges import Snapshot
from grantwatch.store import SnapshotStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 10.0


class CycleStatus(enum.Enum):
    BASELINE = "baseline"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    FAILED = "failed"


@dataclass
class CycleResult:
    status: CycleStatus
    delta: Delta | None = None
    snapshot: Snapshot | None = None
    persisted: bool = False
    error: str | None = None


class PermissionMonitor:
    def __init__(
        self,
        adapter: DatabaseAdapter,
        store: SnapshotStore,
        role: str,
        *,
        interval: float = DEFAULT_INTERVAL,
        cycle_timeout: float | None = None,
    ) -> None:
        self.adapter = adapter
        self.store = store
        self.role = role
        self.interval = interval
        self.cycle_timeout = cycle_timeout
        self._previous: Snapshot = frozenset()

    @property
    def previous(self) -> Snapshot:
        return self._previous

    def load_state(self) -> None:
        """Seed the previous snapshot from the state file, best effort."""
        try:
            snapshot = self.store.load()
        except StoreError as e:
            logger.warning("ignoring unreadable state file, starting fresh: %s", e)
            return

        if snapshot is None:
            logger.info("no prior state at %s, starting fresh", self.store.path)
            return

        self._previous = snapshot
        logger.info("loaded %d privileges from %s", len(snapshot), self.store.path)

    async def _collect(self) -> Snapshot:
        if self.cycle_timeout is None:
            return await collect(self.adapter, self.role)
        try:
            return await asyncio.wait_for(collect(self.adapter, self.role), self.cycle_timeout)
        except TimeoutError as e:
            raise CollectionError(
                "cycle", f"timed out after {self.cycle_timeout:g}s"
            ) from e

    async def run_cycle(self) -> CycleResult:
        """Run one observation cycle. Never raises for database or file errors."""
        try:
            current = await self._collect()
        except CollectionError as e:
            logger.error("collection failed, skipping cycle: %s", e)
            return CycleResult(status=CycleStatus.FAILED, error=str(e))

        delta: Delta | None = None
        if self._previous:
            delta = diff(self._previous, current)
            if delta.has_changes:
                logger.info("changes detected: %s", ", ".join(delta.tags()))
                status = CycleStatus.CHANGED
            else:
                status = CycleStatus.UNCHANGED
        else:
            logger.info(
                "establishing baseline for %s with %d privileges", self.role, len(current)
            )
            status = CycleStatus.BASELINE

        self._previous = current

        persisted = True
        try:
            self.store.save(current)
        except StoreError as e:
            logger.error("could not save state: %s", e)
            persisted = False

        return CycleResult(status=status, delta=delta, snapshot=current, persisted=persisted)

    async def run(
        self,
        *,
        max_cycles: int | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Cycle forever (or ``max_cycles`` times), sleeping ``interval`` between cycles."""
        logger.info(
            "monitoring privileges of %s every %gs", self.role, self.interval
        )
        cycles = 0
        while True:
            await self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                return
            await sleep(self.interval)
