"""Cancelable delayed callbacks for round advancement."""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def _loop_call_later(delay: float, callback: Callable[[], None]):
    return asyncio.get_running_loop().call_later(delay, callback)


class AdvanceTimer:
    """Holds at most one pending callback; arming a new one cancels the old.

    `call_later(delay, callback)` must return a handle with `cancel()`. The
    default schedules on the running asyncio loop; without a running loop
    nothing is scheduled and the caller has to advance manually.
    """

    def __init__(self, call_later: Callable = None):
        self._call_later = call_later or _loop_call_later
        self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, callback: Callable[[], None]) -> bool:
        """Arm the timer. Returns False if it could not be scheduled."""
        self.cancel()

        def fire():
            self._handle = None
            callback()

        try:
            self._handle = self._call_later(delay, fire)
        except RuntimeError as e:
            logger.debug(f"No event loop to schedule advance on: {e}")
            self._handle = None
            return False
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
