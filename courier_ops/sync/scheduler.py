"""
DEFERRED CALLBACK SCHEDULERS

The sync coordinator never sleeps or spawns threads itself; it asks a
scheduler for:

    call_later(delay_seconds, callback) -> handle with .cancel()
    submit(awaitable, done)             -> runs an async fetch, then
                                           done(result, error)

AsyncioScheduler:   cooperative, one event loop (default)
ThreadingScheduler: threading.Timer based, for hosts without a running
                     loop (Streamlit). Every callback runs under one lock,
                     so callbacks still never interleave.
"""

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DoneCallback = Callable[[Any, Optional[BaseException]], None]


class AsyncioScheduler:

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def submit(self, awaitable: Awaitable, done: DoneCallback) -> asyncio.Future:
        future = asyncio.ensure_future(awaitable, loop=self.loop)

        def _finished(fut: asyncio.Future) -> None:
            if fut.cancelled():
                done(None, asyncio.CancelledError())
                return
            error = fut.exception()
            done(None if error else fut.result(), error)

        future.add_done_callback(_finished)
        return future


class _ThreadTimerHandle:

    def __init__(self, timer: threading.Timer):
        self._timer = timer
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
        self._timer.cancel()


class ThreadingScheduler:

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ThreadTimerHandle:
        handle: _ThreadTimerHandle

        def _run() -> None:
            with self.lock:
                if handle.cancelled:
                    return
                try:
                    callback()
                except Exception as e:
                    logger.error(f"Scheduled callback failed: {str(e)}")

        timer = threading.Timer(delay, _run)
        timer.daemon = True
        handle = _ThreadTimerHandle(timer)
        timer.start()
        return handle

    def submit(self, awaitable: Awaitable, done: DoneCallback) -> threading.Thread:

        def _runner() -> None:
            result, error = None, None
            try:
                result = asyncio.run(_await(awaitable))
            except Exception as e:
                error = e
            with self.lock:
                done(result, error)

        thread = threading.Thread(target=_runner, daemon=True)
        thread.start()
        return thread


async def _await(awaitable: Awaitable) -> Any:
    return await awaitable
