"""Bounded concurrent execution of packaging tasks.

Tasks run on a fixed-size worker pool. A failing task never cancels its
siblings: the coordinator waits for every submitted task to finish and then
reports the first failure in submission order.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from nfpm_pipe.exceptions import TaskSkip

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.FAILED, TaskState.SKIPPED)


@dataclass
class Task:
    """One unit of work, e.g. a (format, platform group) pair."""

    name: str
    run: Callable[[], object]
    state: TaskState = TaskState.PENDING
    error: Optional[BaseException] = None
    skip_reason: str = ""


@dataclass
class CoordinatorResult:
    tasks: List[Task] = field(default_factory=list)

    @property
    def first_error(self) -> Optional[BaseException]:
        for task in self.tasks:
            if task.state == TaskState.FAILED:
                return task.error
        return None

    def count(self, state: TaskState) -> int:
        return sum(1 for task in self.tasks if task.state == state)


class TaskCoordinator:
    """Runs tasks with at most ``parallelism`` of them active at a time."""

    def __init__(self, parallelism: int) -> None:
        if parallelism < 1:
            raise ValueError("parallelism must be at least 1")
        self.parallelism = parallelism
        self._lock = threading.Lock()

    def run(self, tasks: Sequence[Task]) -> CoordinatorResult:
        """Run every task to a terminal state and return the outcomes."""
        result = CoordinatorResult(tasks=list(tasks))
        if not result.tasks:
            return result
        with ThreadPoolExecutor(max_workers=self.parallelism, thread_name_prefix="nfpm") as executor:
            futures = [executor.submit(self._execute, task) for task in result.tasks]
            for future in futures:
                future.result()
        logger.debug(
            f"tasks finished: succeeded={result.count(TaskState.SUCCEEDED)} "
            f"skipped={result.count(TaskState.SKIPPED)} failed={result.count(TaskState.FAILED)}"
        )
        return result

    def _execute(self, task: Task) -> None:
        self._transition(task, TaskState.RUNNING)
        try:
            task.run()
        except TaskSkip as skip:
            task.skip_reason = skip.reason
            self._transition(task, TaskState.SKIPPED)
        except Exception as err:
            task.error = err
            logger.debug(f"task {task.name} failed: {err}")
            self._transition(task, TaskState.FAILED)
        else:
            self._transition(task, TaskState.SUCCEEDED)

    def _transition(self, task: Task, state: TaskState) -> None:
        with self._lock:
            task.state = state
