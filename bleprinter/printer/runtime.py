"""Background event loop that owns the printer session.

bleak clients are bound to the event loop they were created on, while Flask
serves requests from worker threads. All printer coroutines therefore run on
one long-lived loop in a dedicated thread, and request threads submit work
to it with ``run()``.
"""
import asyncio
import threading
from typing import Any, Awaitable, Optional

from bleprinter.logging_config import get_logger

logger = get_logger(__name__)


class PrinterRuntime:
    """Runs an asyncio loop in a background thread."""

    def __init__(self, name: str = "Printer"):
        self.name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the loop thread (no-op if already running)."""
        with self._lock:
            if self.running:
                return
            self._ready.clear()
            self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
            self._thread.start()
            self._ready.wait()
        logger.info("Printer runtime started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop and join the thread."""
        with self._lock:
            if not self.running:
                return
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=timeout)
            stopped = not self._thread.is_alive()
        if not stopped:
            logger.warning("Printer runtime did not stop within %.1fs", timeout)
        else:
            logger.info("Printer runtime stopped")

    def run(self, coro: Awaitable, timeout: Optional[float] = None) -> Any:
        """Run a coroutine on the printer loop and wait for its result."""
        if not self.running:
            self.start()
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=timeout)

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._ready.set()
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()
