# halbot - Discord Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Delayed Task Scheduler

Holds pending (fire time, action) pairs and runs the ones that are due.
A discord.ext.tasks loop ticks several times per second; due actions run
on a bounded worker pool and their return value decides whether the task
is dropped or queued again.
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

import pytz
from discord.ext import tasks

logger = logging.getLogger("halbot.reminders.scheduler")

# Loop interval; BotConfig.tick_seconds overrides it at start()
DEFAULT_TICK_SECONDS = 0.25
DEFAULT_WORKERS = 4


def utcnow() -> datetime:
    return datetime.now(pytz.UTC)


class Done:
    """Task result: the task is finished and is dropped."""

    def __repr__(self) -> str:
        return "DONE"


DONE = Done()


@dataclass(frozen=True)
class RepeatAt:
    """Task result: run the same task again at ``when``."""

    when: datetime


TaskResult = Union[Done, RepeatAt]


class ScheduledAction(ABC):
    """Something the scheduler can run. Holds its own context."""

    @abstractmethod
    async def run(self) -> TaskResult:
        ...


@dataclass(order=True)
class ScheduledTask:
    fire_time: datetime
    seq: int
    task_id: int = field(compare=False)
    action: ScheduledAction = field(compare=False)


class TaskScheduler:
    """
    Runs scheduled actions at (or after) their fire time.

    A task is taken off the queue while its action runs, so it can never fire
    a second time before the first run returns. Order between tasks that are
    due in the same tick is not defined.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        workers: int = DEFAULT_WORKERS,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        self._clock = clock
        self._tick_seconds = tick_seconds
        self._queue: list[ScheduledTask] = []
        self._lock = asyncio.Lock()
        self._workers = asyncio.Semaphore(workers)
        self._running: set[asyncio.Task] = set()
        self._ids = itertools.count(1)
        self._seq = itertools.count()
        self._started = False

    def now(self) -> datetime:
        return self._clock()

    @property
    def pending(self) -> int:
        """Number of queued tasks (tasks currently running are not counted)."""
        return len(self._queue)

    @property
    def in_flight(self) -> int:
        return len(self._running)

    async def add_task(
        self, when: Union[timedelta, datetime], action: ScheduledAction
    ) -> int:
        """
        Queue an action.

        Args:
            when: Delay from now, or an absolute timezone-aware time
            action: The action to run

        Returns:
            The task ID
        """
        if isinstance(when, timedelta):
            fire_time = self.now() + when
        else:
            fire_time = when

        task = ScheduledTask(fire_time, next(self._seq), next(self._ids), action)
        async with self._lock:
            heapq.heappush(self._queue, task)

        logger.debug(f"Scheduled task {task.task_id} for {fire_time.isoformat()}")
        return task.task_id

    async def run_pending(self) -> list[asyncio.Task]:
        """
        Start every task whose fire time has passed.

        Returns:
            The asyncio tasks running the due actions
        """
        now = self.now()
        due = []
        async with self._lock:
            while self._queue and self._queue[0].fire_time <= now:
                due.append(heapq.heappop(self._queue))

        started = []
        for task in due:
            runner = asyncio.create_task(self._run(task))
            self._running.add(runner)
            runner.add_done_callback(self._running.discard)
            started.append(runner)
        return started

    async def _run(self, task: ScheduledTask) -> None:
        async with self._workers:
            try:
                result = await task.action.run()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    f"Task {task.task_id} raised, dropping it: {e}", exc_info=True
                )
                return

        if isinstance(result, RepeatAt):
            task.fire_time = result.when
            task.seq = next(self._seq)
            async with self._lock:
                heapq.heappush(self._queue, task)
            logger.debug(f"Task {task.task_id} repeats at {result.when.isoformat()}")
        else:
            logger.debug(f"Task {task.task_id} done")

    def start(self, tick_seconds: Optional[float] = None) -> None:
        """Start the scheduler loop."""
        if tick_seconds is not None:
            self._tick_seconds = tick_seconds
        if not self._started:
            self._tick.change_interval(seconds=self._tick_seconds)
            self._tick.start()
            self._started = True
            logger.info(f"Task scheduler started (tick {self._tick_seconds}s)")

    def stop(self) -> None:
        """Stop the loop and cancel running actions."""
        if self._started:
            self._tick.cancel()
            self._started = False
            logger.info("Task scheduler stopped")
        for runner in list(self._running):
            runner.cancel()

    @tasks.loop(seconds=DEFAULT_TICK_SECONDS)
    async def _tick(self) -> None:
        try:
            await self.run_pending()
        except Exception as e:
            logger.error(f"Error in scheduler loop: {e}", exc_info=True)
