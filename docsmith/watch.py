"""Rebuild coordination for watch mode."""

from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import DocsmithError
from .logging import get_logger, log_exception
from .sources import SourceFilter

FullRebuild = Callable[[], Awaitable[None]]
MicroRebuild = Callable[[List[str]], Awaitable[None]]

ADDED = "added"
CHANGED = "changed"
REMOVED = "removed"

STRUCTURAL = "structural"
CONTENT = "content"

_EVENT_CLASSES = {ADDED: STRUCTURAL, REMOVED: STRUCTURAL, CHANGED: CONTENT}


class CoordinatorState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"


class RebuildCoordinator:
    """Debounces file events into full and micro rebuilds.

    Added and removed files restart the structural timer; changed files are
    queued and restart the content timer. The two timers are independent and
    each one triggers its own rebuild when it fires.

    Rebuilds never overlap. A trigger that fires while a rebuild is running is
    queued behind it, and at most one trigger per kind waits in that queue: a
    further trigger of the same kind is dropped because the queued run already
    picks up everything it would have done (a micro rebuild reads the pending
    file list only when it starts).
    """

    def __init__(
        self,
        full_rebuild: FullRebuild,
        micro_rebuild: MicroRebuild,
        *,
        debounce_seconds: float = 1.0,
        source_filter: SourceFilter | None = None,
        root: Path | None = None,
    ) -> None:
        self.full_rebuild = full_rebuild
        self.micro_rebuild = micro_rebuild
        self.debounce_seconds = debounce_seconds
        self.source_filter = source_filter
        self.root = root
        self.state = CoordinatorState.IDLE
        self.logger = get_logger("watch")

        self._pending: List[str] = []
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._tasks: Set[asyncio.Task[None]] = set()
        self._queued: Set[str] = set()
        self._lock = asyncio.Lock()

    @property
    def pending_files(self) -> List[str]:
        return list(self._pending)

    def start_watching(self) -> bool:
        """Move from IDLE to WATCHING; only the first call has an effect."""
        if self.state is CoordinatorState.WATCHING:
            return False
        self.state = CoordinatorState.WATCHING
        return True

    def on_event(self, kind: str, path: str) -> None:
        """Handle one filesystem event; must run on the event loop thread."""
        if self.state is not CoordinatorState.WATCHING:
            self.logger.debug("Ignoring %s event for %s before watching started", kind, path)
            return
        category = _EVENT_CLASSES.get(kind)
        if category is None:
            raise ValueError(f"Unknown file event: {kind}")
        if self.source_filter is not None and not self.source_filter.accepts(path, self.root):
            return

        self.logger.debug("File %s has been %s", path, kind)
        if category == CONTENT:
            absolute = str(Path(path).resolve())
            if absolute not in self._pending:
                self._pending.append(absolute)
        self._restart_timer(category)

    async def drain(self) -> None:
        """Wait until no timer is armed and no rebuild is running."""
        while self._timers or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self.debounce_seconds / 4 or 0.01)

    def cancel(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        for task in list(self._tasks):
            task.cancel()

    def _restart_timer(self, category: str) -> None:
        loop = asyncio.get_running_loop()
        previous = self._timers.pop(category, None)
        if previous is not None:
            previous.cancel()
        self._timers[category] = loop.call_later(self.debounce_seconds, self._fire, category)

    def _fire(self, category: str) -> None:
        self._timers.pop(category, None)
        if category in self._queued:
            self.logger.debug("A %s rebuild is already queued; dropping trigger", category)
            return
        self._queued.add(category)
        task = asyncio.get_running_loop().create_task(self._run(category))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, category: str) -> None:
        async with self._lock:
            self._queued.discard(category)
            try:
                if category == STRUCTURAL:
                    self.logger.info("Source files added or removed, running a full rebuild")
                    await self.full_rebuild()
                else:
                    files = self._pending
                    self._pending = []
                    if not files:
                        return
                    self.logger.info("%d source file(s) changed, running a micro rebuild", len(files))
                    await self.micro_rebuild(files)
            except DocsmithError as exc:
                self.logger.error("Rebuild failed, waiting for the next change: %s", exc)
            except Exception as exc:
                log_exception(self.logger, "Rebuild failed, waiting for the next change", exc)


class _ForwardingHandler(FileSystemEventHandler):
    def __init__(self, loop: asyncio.AbstractEventLoop, coordinator: RebuildCoordinator) -> None:
        self.loop = loop
        self.coordinator = coordinator

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(ADDED, event.src_path, event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(REMOVED, event.src_path, event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(CHANGED, event.src_path, event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._forward(REMOVED, event.src_path, event)
        self._forward(ADDED, event.dest_path, event)

    def _forward(self, kind: str, path: str | bytes, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if isinstance(path, bytes):
            path = path.decode()
        self.loop.call_soon_threadsafe(self.coordinator.on_event, kind, path)


class WatchdogEventSource:
    """Feeds watchdog filesystem events into a coordinator's event loop."""

    def __init__(self, coordinator: RebuildCoordinator) -> None:
        self.coordinator = coordinator
        self.logger = get_logger("watch")
        self._observer: Optional[Observer] = None

    def start(self, folder: Path, loop: asyncio.AbstractEventLoop) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(_ForwardingHandler(loop, self.coordinator), str(folder), recursive=True)
        observer.start()
        self._observer = observer
        self.logger.info("Watching sources in %s", folder)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None


__all__ = [
    "ADDED",
    "CHANGED",
    "CONTENT",
    "CoordinatorState",
    "REMOVED",
    "RebuildCoordinator",
    "STRUCTURAL",
    "WatchdogEventSource",
]
