"""Bridge between the Qt event loop and the asyncio loop that runs the controllers."""
from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Awaitable, Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from ...shared.logging_config import configure_logging

logger = configure_logging(__name__)


class AsyncRunner(QObject):
    """Runs coroutines on a private asyncio loop; callbacks fire on the Qt thread.

    All controller state is touched from the loop thread only. Synchronous
    controller calls (``ChatSession.close``) go through :meth:`call` for that reason.
    """

    _finished = pyqtSignal(object, object)

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="taskmasters-loop", daemon=True)
        self._finished.connect(self._deliver)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def submit(self, coro: Awaitable[Any], on_done: Optional[Callable[[Any], None]] = None) -> Future:
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        future.add_done_callback(lambda f: self._finished.emit(on_done, f))
        return future

    def call(self, func: Callable[..., Any], *args: Any, on_done: Optional[Callable[[Any], None]] = None) -> Future:
        async def invoke():
            return func(*args)

        return self.submit(invoke(), on_done)

    def _deliver(self, on_done: Optional[Callable[[Any], None]], future: Future) -> None:
        try:
            result = future.result()
        except Exception:  # noqa: BLE001
            logger.exception("BACKGROUND_TASK_FAILED")
            return
        if on_done is not None:
            on_done(result)

    def shutdown(self) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=2)
