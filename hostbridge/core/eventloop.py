"""Single-threaded cooperative event loop for Host Bridge.

Every entity mutation, connection state transition and inbound message is
handled on the thread that runs the loop. The loop interleaves three kinds
of work:

- pollers: network I/O, e.g. the paho client's ``loop()`` call
- timers: one-shot or repeating callbacks, e.g. the reconnect timer
- queued callbacks: handed over from other threads with
  ``call_soon_threadsafe``

Background threads (D-Bus listeners, HTTP checks) must never touch entities
directly; they queue a callback instead.

Example:
    >>> loop = EventLoop()
    >>> timer = loop.create_timer(1.0, lambda: print("tick"))
    >>> timer.start()
    >>> loop.run_forever()  # until loop.stop() is called
"""

# Standard library imports
import logging
import queue
import threading
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# Upper bound for a single wait so stop() is honoured promptly
DEFAULT_POLL_INTERVAL = 0.1


class Timer:
    """A timer owned by an :class:`EventLoop`.

    Attributes:
        interval: Seconds between start() and the callback firing.
        single_shot: Fire once and deactivate instead of repeating.
    """

    def __init__(self, loop: "EventLoop", interval: float, callback: Callable[[], None], single_shot: bool = False):
        self.loop = loop
        self.interval = interval
        self.callback = callback
        self.single_shot = single_shot
        self._deadline: Optional[float] = None

    def start(self) -> None:
        """Arm the timer; restarting an active timer resets its deadline."""
        self._deadline = self.loop.time() + self.interval

    def stop(self) -> None:
        self._deadline = None

    def is_active(self) -> bool:
        return self._deadline is not None

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def _fire(self) -> None:
        if self.single_shot:
            self._deadline = None
        else:
            self._deadline = self.loop.time() + self.interval
        self.callback()


class EventLoop:
    """Cooperative loop running pollers, timers and queued callbacks.

    Attributes:
        poll_interval: Longest time a single iteration waits for work.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self._clock = clock
        self.poll_interval = poll_interval
        # SimpleQueue.put is reentrant, so stop() works from a signal handler
        self._queue: "queue.SimpleQueue" = queue.SimpleQueue()
        self._timers: List[Timer] = []
        self._pollers: List[Callable[[float], bool]] = []
        self._stop_event = threading.Event()
        self._running = False

    def time(self) -> float:
        return self._clock()

    # -- registration ---------------------------------------------------

    def create_timer(self, interval: float, callback: Callable[[], None], single_shot: bool = False) -> Timer:
        timer = Timer(self, interval, callback, single_shot)
        self._timers.append(timer)
        return timer

    def add_poller(self, poller: Callable[[float], bool]) -> None:
        """Add an I/O poller.

        The poller is called with the longest time it may block and returns
        True when it actually waited, so the loop does not also sleep.
        """
        self._pollers.append(poller)

    def call_soon_threadsafe(self, callback: Callable, *args) -> None:
        """Queue ``callback(*args)`` to run on the loop thread."""
        self._queue.put((callback, args))

    # -- running --------------------------------------------------------

    def run_once(self, timeout: Optional[float] = None) -> None:
        """Run one iteration: poll I/O, fire due timers, drain the queue."""
        if timeout is None:
            timeout = self._time_until_next_timer()

        waited = False
        for poller in list(self._pollers):
            try:
                waited = poller(timeout) or waited
            except Exception as e:
                logger.error(f"Error in event loop poller: {e}", exc_info=True)

        if not waited and timeout > 0 and self._queue.empty():
            try:
                callback, args = self._queue.get(timeout=timeout)
            except queue.Empty:
                pass
            else:
                self._invoke(callback, args)

        self._run_due_timers()
        self._drain_queue()

    def run_forever(self) -> None:
        """Run until :meth:`stop` is called."""
        self._stop_event.clear()
        self._running = True
        logger.debug("Event loop started")
        try:
            while not self._stop_event.is_set():
                self.run_once()
        finally:
            self._running = False
            logger.debug("Event loop stopped")

    def stop(self) -> None:
        """Ask the loop to return; safe to call from any thread or a signal handler."""
        self._stop_event.set()
        self._queue.put((lambda: None, ()))

    def is_running(self) -> bool:
        return self._running

    # -- internals ------------------------------------------------------

    def _time_until_next_timer(self) -> float:
        deadlines = [t.deadline for t in self._timers if t.deadline is not None]
        if not deadlines:
            return self.poll_interval
        return max(0.0, min(self.poll_interval, min(deadlines) - self.time()))

    def _run_due_timers(self) -> None:
        now = self.time()
        for timer in list(self._timers):
            if timer.deadline is not None and timer.deadline <= now:
                try:
                    timer._fire()
                except Exception as e:
                    logger.error(f"Error in timer callback: {e}", exc_info=True)

    def _drain_queue(self) -> None:
        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return
            self._invoke(callback, args)

    def _invoke(self, callback: Callable, args) -> None:
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Error in queued callback: {e}", exc_info=True)
