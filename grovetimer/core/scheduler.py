"""Recurring callback scheduling for the timer engine."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class ScheduledTask(ABC):
    """Handle to a recurring callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop future invocations. Safe to call more than once."""
        pass


class Scheduler(ABC):
    """Runs a callback repeatedly at a fixed interval."""

    @abstractmethod
    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        """Invoke *callback* every *interval* seconds until cancelled."""
        pass


class _RepeatingThread(ScheduledTask):
    __slots__ = ("_interval", "_callback", "_cancelled", "_thread")

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True, name="grovetimer-tick")

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Scheduled callback raised; cancelling")
                self._cancelled.set()


class ThreadingScheduler(Scheduler):
    """Scheduler backed by one daemon thread per recurring task."""

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        task = _RepeatingThread(interval, callback)
        task.start()
        return task
