"""
Single control thread for the direction system

Sensor and HTTP callbacks arrive on arbitrary threads; they are queued here
and executed one at a time on the loop thread, so direction state is only
ever touched by a single writer.
"""
import heapq
import itertools
import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from queue import Queue, Empty
from typing import Callable, Optional

from .core.interfaces import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

_WAKEUP = object()


class LoopTimer(TimerHandle):
    """Handle for a callback scheduled with call_later"""

    def __init__(self, when: float, seq: int, callback: Callable, args: tuple):
        self.when = when
        self._seq = seq
        self._callback = callback
        self._args = args
        self._cancelled = False

    def __lt__(self, other: 'LoopTimer') -> bool:
        return (self.when, self._seq) < (other.when, other._seq)

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run(self):
        if not self._cancelled:
            self._callback(*self._args)


class EventLoop(Scheduler):
    """Queue-driven control loop with cancellable timers"""

    def __init__(self, name: str = "CompassLoop", clock: Callable[[], float] = time.monotonic,
                 idle_wait: float = 0.5):
        self.name = name
        self._clock = clock
        self._idle_wait = idle_wait
        self._queue: Queue = Queue()
        self._timers = []
        self._timer_lock = threading.Lock()
        self._seq = itertools.count()
        self._thread: Optional[threading.Thread] = None
        self._running = threading.Event()

    def start(self) -> bool:
        if self._running.is_set():
            logger.warning(f"{self.name} already running")
            return False
        self._running.set()
        self._thread = threading.Thread(target=self._run, daemon=True, name=self.name)
        self._thread.start()
        logger.info(f"{self.name} started")
        return True

    def stop(self, timeout: float = 2.0):
        if not self._running.is_set():
            return
        self._running.clear()
        self._queue.put(_WAKEUP)
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.info(f"{self.name} stopped")

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def is_loop_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def call_soon(self, callback: Callable, *args):
        self._queue.put((callback, args))

    def call_later(self, delay: float, callback: Callable, *args) -> LoopTimer:
        timer = LoopTimer(self._clock() + max(0.0, delay), next(self._seq), callback, args)
        with self._timer_lock:
            heapq.heappush(self._timers, timer)
        # Wake the loop so it recalculates its wait time
        self._queue.put(_WAKEUP)
        return timer

    def call_and_wait(self, callback: Callable, *args, timeout: float = 2.0):
        """
        Run callback on the loop thread and return its result

        Raises:
            concurrent.futures.TimeoutError: loop did not run the callback in time
        """
        if self.is_loop_thread():
            return callback(*args)

        future: Future = Future()

        def runner():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(callback(*args))
            except Exception as e:
                future.set_exception(e)

        self.call_soon(runner)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            # a late runner must not act after the caller gave up
            future.cancel()
            raise

    def _run(self):
        while self._running.is_set():
            wait = self._run_due_timers()
            try:
                item = self._queue.get(timeout=wait)
            except Empty:
                continue
            if item is _WAKEUP:
                continue
            callback, args = item
            self._invoke(callback, args)

    def _run_due_timers(self) -> float:
        """Run expired timers; return how long the loop may block"""
        due = []
        with self._timer_lock:
            now = self._clock()
            while self._timers and self._timers[0].when <= now:
                due.append(heapq.heappop(self._timers))
            next_when = self._timers[0].when if self._timers else None

        for timer in due:
            self._invoke(timer.run, ())

        if next_when is None:
            return self._idle_wait
        return min(self._idle_wait, max(0.0, next_when - self._clock()))

    def _invoke(self, callback: Callable, args: tuple):
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Error in {self.name} callback {getattr(callback, '__name__', callback)}: {e}",
                         exc_info=True)
