"""
Batch scheduler with bounded concurrency.

Tasks run in consecutive groups of at most ``limit``. A group is started
together and fully settled before the next group starts; a failing task never
cancels its group-mates or later groups.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class TaskResult(Generic[T]):
    """Outcome of one scheduled task: a value or the exception it raised."""

    index: int
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchScheduler:
    """Runs independent async tasks in order-preserving batches."""

    def __init__(self, limit: int):
        """
        Args:
            limit: Maximum number of tasks in flight at once.
        """
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")
        self.limit = limit

    async def run(self, tasks: Sequence[TaskFactory[T]]) -> list[TaskResult[T]]:
        """
        Execute all tasks and report every outcome.

        Args:
            tasks: Zero-argument callables returning awaitables. A task is not
                started until its batch begins.

        Returns:
            One TaskResult per task, in input order.
        """
        results: list[TaskResult[T]] = []
        total_batches = (len(tasks) + self.limit - 1) // self.limit

        for batch_number, start in enumerate(range(0, len(tasks), self.limit), start=1):
            batch = tasks[start : start + self.limit]
            logger.debug(
                "Running batch %d/%d (%d tasks)", batch_number, total_batches, len(batch)
            )

            settled = await asyncio.gather(
                *(_invoke(task) for task in batch),
                return_exceptions=True,
            )

            for offset, outcome in enumerate(settled):
                index = start + offset
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.debug("Task %d failed: %s", index, outcome)
                    results.append(TaskResult(index=index, error=outcome))
                else:
                    results.append(TaskResult(index=index, value=outcome))

        return results


async def _invoke(task: TaskFactory[T]) -> T:
    # Errors raised by the factory itself count as this task's failure
    return await task()
