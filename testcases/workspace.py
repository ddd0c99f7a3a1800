"""
Workspace change batching.

Raw watchers report one path at a time. ``WorkspaceObserver`` folds those
notifications into a single ``WorkspaceChange`` and hands it to the catalog
after a short quiet period, so a burst of saves triggers one reconciliation.
"""

import asyncio
from typing import Callable, Optional

from loguru import logger

from .types import WorkspaceChange


class WorkspaceObserver:
    """Debounced collector of created/changed/deleted paths.

    Coalescing rules for a path within one batch:
    - created cancels a pending delete
    - deleted cancels pending created and changed
    - changed is dropped while the path is pending as created
    """

    def __init__(self, handler: Callable[[WorkspaceChange], None], debounce: float = 0.25):
        self._handler = handler
        self._debounce = debounce
        self._pending = WorkspaceChange()
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> WorkspaceChange:
        return self._pending

    def file_created(self, path: str) -> None:
        self._pending.deleted.discard(path)
        self._pending.created.add(path)
        self._schedule()

    def file_changed(self, path: str) -> None:
        if path in self._pending.created:
            return
        self._pending.changed.add(path)
        self._schedule()

    def file_deleted(self, path: str) -> None:
        self._pending.created.discard(path)
        self._pending.changed.discard(path)
        self._pending.deleted.add(path)
        self._schedule()

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: caller is expected to flush() explicitly
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self._debounce, self.flush)

    def flush(self) -> None:
        """Deliver the pending batch now, if there is one."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._pending.is_empty():
            return
        change, self._pending = self._pending, WorkspaceChange()
        logger.debug(
            f"Workspace change: +{len(change.created)} ~{len(change.changed)} -{len(change.deleted)}"
        )
        self._handler(change)

    def dispose(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = WorkspaceChange()
