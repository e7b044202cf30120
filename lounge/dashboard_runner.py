from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
import time
from typing import Awaitable, Callable, Optional

from lounge.dashboard_sync import AdminDashboardSync
from lounge.notices import Notice

logger = logging.getLogger(__name__)

SyncFactory = Callable[[], Awaitable[AdminDashboardSync]]


class DashboardRunner:
    """Hosts one AdminDashboardSync on a private event loop thread.

    Streamlit scripts are synchronous and re-run on every interaction; the
    sync loop has to outlive them to hold its realtime subscription. One
    runner lives in session state for as long as the dashboard is open.

    A closed or reloaded tab never reaches `stop()`, so the view calls
    `heartbeat()` on every render. With `idle_timeout` set, a watchdog on the
    loop releases the subscription and ends the thread once heartbeats stop.
    """

    def __init__(
        self,
        factory: SyncFactory,
        notify: Callable[[Notice], None],
        idle_timeout: Optional[float] = None,
        check_every: float = 1.0,
    ):
        self._factory = factory
        self._notify = notify
        self.idle_timeout = idle_timeout
        self.check_every = check_every
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._last_beat = time.monotonic()
        self._expired = False
        self.sync: Optional[AdminDashboardSync] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def heartbeat(self) -> None:
        self._last_beat = time.monotonic()

    def start(self) -> AdminDashboardSync:
        if self.running:
            return self.sync

        self._expired = False
        self.heartbeat()
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run, args=(self._loop,), name="admin-dashboard-sync", daemon=True,
        )
        self._thread.start()

        try:
            self.sync = self.call(self._factory())
        except BaseException:
            self.stop()
            raise
        self.submit(self.sync.mount())
        if self.idle_timeout is not None:
            self.submit(self._watch())
        return self.sync

    def _run(self, loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()

    def call(self, coro):
        """Run `coro` on the loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def submit(self, coro) -> concurrent.futures.Future:
        """Schedule `coro` on the loop without waiting. Failures become notices."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        future.add_done_callback(self._report)
        return future

    def _report(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Dashboard task failed", exc_info=exc)
            self._notify(Notice("error", getattr(exc, "message", None) or str(exc)))

    def stop(self) -> None:
        with self._lock:
            if self._thread is None:
                return
            # the watchdog may already have released everything and stopped the loop
            if not self._expired and self._thread.is_alive():
                try:
                    self.call(self._release())
                finally:
                    self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
            self._thread = None
        logger.info("Dashboard sync loop stopped")

    async def _watch(self) -> None:
        while time.monotonic() - self._last_beat <= self.idle_timeout:
            await asyncio.sleep(self.check_every)

        if not self._lock.acquire(blocking=False):
            return  # stop() is already shutting down
        try:
            logger.info("No dashboard heartbeat for %.1fs; releasing subscription", self.idle_timeout)
            self._expired = True
            await self._release()
        finally:
            self._lock.release()
            asyncio.get_running_loop().stop()

    async def _release(self) -> None:
        try:
            if self.sync is not None:
                await self.sync.unmount()
        finally:
            await self._cancel_leftovers()

    async def _cancel_leftovers(self) -> None:
        current = asyncio.current_task()
        leftovers = [t for t in asyncio.all_tasks() if t is not current]
        for task in leftovers:
            task.cancel()
        await asyncio.gather(*leftovers, return_exceptions=True)
