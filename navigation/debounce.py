"""Cancel-then-reschedule helper for coalescing bursts of events"""
import logging
from typing import Callable, Optional

from .core.interfaces import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class DebouncedAction:
    """
    Runs action once a burst of triggers has been quiet for `delay` seconds.

    Must be triggered from the scheduler's control thread; the stored handle is
    cancelled before every reschedule.
    """

    def __init__(self, scheduler: Scheduler, delay: float, action: Callable):
        self._scheduler = scheduler
        self.delay = delay
        self._action = action
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    def trigger(self, *args):
        self.cancel()
        self._handle = self._scheduler.call_later(self.delay, self._fire, *args)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, *args):
        self._handle = None
        self._action(*args)
