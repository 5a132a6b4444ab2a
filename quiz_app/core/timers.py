# core/timers.py

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    name: str
    interval: float
    callback: Callable[[], None]
    next_due: float
    catch_up: bool = False

    def run_due(self, now: float) -> int:
        """
        Fire the callback if the task is due. Catch-up tasks fire once per
        whole interval that elapsed; the others fire once and skip ahead.
        """
        if now < self.next_due:
            return 0

        if not self.catch_up:
            self.callback()
            missed = int((now - self.next_due) // self.interval)
            self.next_due += (missed + 1) * self.interval
            return 1

        fired = 0
        while self.next_due <= now:
            self.callback()
            self.next_due += self.interval
            fired += 1
        return fired


class TaskScheduler:
    """Named periodic tasks, polled by the UI loop through run_pending()."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.tasks: Dict[str, ScheduledTask] = {}

    def schedule(self, name: str, interval: float, callback: Callable[[], None],
                 catch_up: bool = False) -> ScheduledTask:
        """(Re)start a task; an existing task with the same name is replaced."""
        task = ScheduledTask(
            name=name,
            interval=interval,
            callback=callback,
            next_due=self.clock() + interval,
            catch_up=catch_up,
        )
        self.tasks[name] = task
        logger.debug("Scheduled %s every %ss", name, interval)
        return task

    def cancel(self, name: str) -> bool:
        task = self.tasks.pop(name, None)
        if task:
            logger.debug("Cancelled %s", name)
        return task is not None

    def is_scheduled(self, name: str) -> bool:
        return name in self.tasks

    def run_pending(self, now: Optional[float] = None) -> int:
        now = self.clock() if now is None else now
        fired = 0
        # a callback may cancel tasks, so iterate over a snapshot
        for name, task in list(self.tasks.items()):
            if self.tasks.get(name) is not task:
                continue
            fired += task.run_due(now)
        return fired
