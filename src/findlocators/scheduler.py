from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

Clock = Callable[[], float]


@dataclass(slots=True)
class ScheduledTask:
    callback: Callable[[], None]
    due_at: float
    interval: float | None = None
    name: str = ""
    cancelled: bool = False
    finished: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.finished


class TaskScheduler:
    """Cooperative timer queue driven by explicit ``run_pending`` calls.

    Nothing runs on another thread: the owner polls the scheduler from the
    thread that owns the Playwright page (see ``LocatorTester.pump``).
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or time.monotonic
        self._tasks: list[ScheduledTask] = []

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay_ms: int, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        task = ScheduledTask(callback=callback, due_at=self.now() + max(0, delay_ms) / 1000.0, name=name)
        self._tasks.append(task)
        return task

    def call_every(self, interval_ms: int, callback: Callable[[], None], *, name: str = "") -> ScheduledTask:
        interval = max(1, interval_ms) / 1000.0
        task = ScheduledTask(callback=callback, due_at=self.now() + interval, interval=interval, name=name)
        self._tasks.append(task)
        return task

    def run_pending(self) -> int:
        now = self.now()
        due = sorted(
            (task for task in self._tasks if task.active and task.due_at <= now),
            key=lambda task: task.due_at,
        )
        ran = 0
        try:
            for task in due:
                # An earlier callback in this batch may have cancelled it.
                if not task.active:
                    continue
                if task.interval is None:
                    task.finished = True
                else:
                    task.due_at = now + task.interval
                task.callback()
                ran += 1
        finally:
            self._tasks = [task for task in self._tasks if task.active]
        return ran

    def next_delay_ms(self) -> int | None:
        active = [task.due_at for task in self._tasks if task.active]
        if not active:
            return None
        return max(0, int(round((min(active) - self.now()) * 1000)))

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if task.active)

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks = []
