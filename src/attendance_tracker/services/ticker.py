"""Cancellable periodic ticker for live elapsed-time displays."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)


@dataclass
class ElapsedTicker:
    """Runs a callback immediately and then every ``interval`` seconds.

    The ticker lives in the running event loop as a single task. It must be
    cancelled when the view that owns it goes away.
    """

    interval: float
    callback: Callable[[], None]
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking; a no-op when already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        """Stop ticking; safe to call when not running."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            try:
                self.callback()
            except Exception:
                _logger.exception("Ticker callback failed")
            await asyncio.sleep(self.interval)
