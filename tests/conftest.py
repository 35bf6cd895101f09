"""Shared fixtures: a hand-driven scheduler, an in-memory store and a fake clock."""

import copy
import json
from datetime import datetime, timedelta
from typing import Any, Callable

import pytest

from grovetimer.core.errors import PersistenceError
from grovetimer.core.scheduler import ScheduledTask, Scheduler
from grovetimer.persistence.store import StateStore


class ManualTask(ScheduledTask):
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Fires scheduled callbacks only when the test calls :meth:`tick`."""

    def __init__(self) -> None:
        self.tasks: list[ManualTask] = []

    def schedule_repeating(self, interval, callback):
        task = ManualTask(callback)
        self.tasks.append(task)
        return task

    @property
    def active_tasks(self) -> list[ManualTask]:
        return [t for t in self.tasks if not t.cancelled]

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            for task in self.active_tasks:
                task.callback()

    def fire_stale(self) -> None:
        """Invoke callbacks of cancelled tasks, as a late thread wake-up would."""
        for task in self.tasks:
            if task.cancelled:
                task.callback()


class MemoryStore(StateStore):
    """Dict-backed store; set ``fail_writes`` to make every ``set`` raise."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self.data:
            return default
        return json.loads(self.data[key])

    def set(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise PersistenceError(f"write to {key!r} refused")
        self.writes += 1
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = json.dumps(copy.deepcopy(value))


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 12, 9, 0, 0))
