"""
Cooperative, tick-driven scheduler for timed game routines.

Routines are plain generators. A routine suspends itself with a bare ``yield``
(resume on the next tick) or ``yield Wait(seconds)`` (resume once that much
logical time has passed). Every resume sends the time elapsed since the
routine last ran, so an animation can integrate frame time:

    def fade(card):
        elapsed = 0.0
        while elapsed < 0.3:
            dt = yield
            elapsed += dt
"""
import logging
from typing import Generator, List, Optional

logger = logging.getLogger(__name__)

# Tolerance for accumulated float error when comparing wake-up times
_EPSILON = 1e-9


class Wait:
    """Suspend the current routine for a number of seconds."""

    def __init__(self, seconds: float):
        self.seconds = max(0.0, float(seconds))

    def __repr__(self):
        return f"Wait({self.seconds})"


class Task:
    """A routine registered with a Scheduler."""

    def __init__(self, routine: Generator, name: Optional[str] = None):
        self.routine = routine
        self.name = name or getattr(routine, "__name__", "routine")
        self.wake_time: Optional[float] = None  # None = next tick
        self.last_run = 0.0
        self.done = False

    def __repr__(self):
        status = "done" if self.done else "pending"
        return f"Task({self.name}, {status})"


class Scheduler:
    """
    Single-threaded scheduler that owns the logical game clock.

    All state changes driven by routines happen inside ``start`` or ``tick``,
    so there is never more than one routine running at a time.
    """

    def __init__(self):
        self.time = 0.0
        self._tasks: List[Task] = []

    @property
    def pending(self) -> int:
        """Number of routines that have not finished yet."""
        return len(self._tasks)

    def start(self, routine: Generator, name: Optional[str] = None) -> Task:
        """
        Register a routine and run it up to its first suspension point.

        Args:
            routine: A generator object
            name: Optional label used in logs

        Returns:
            The Task wrapping the routine
        """
        task = Task(routine, name)
        task.last_run = self.time
        self._advance(task, None)
        if not task.done:
            self._tasks.append(task)
        return task

    def tick(self, dt: float) -> None:
        """Advance the clock by ``dt`` seconds and resume every due routine."""
        self.time += max(0.0, dt)

        # Routines started while ticking wait for the next tick
        for task in list(self._tasks):
            if task.done:
                continue
            if task.wake_time is not None and self.time + _EPSILON < task.wake_time:
                continue
            elapsed = self.time - task.last_run
            task.last_run = self.time
            self._advance(task, elapsed)

        self._tasks = [task for task in self._tasks if not task.done]

    def clear(self) -> None:
        """Drop every pending routine without resuming it."""
        for task in self._tasks:
            task.done = True
        self._tasks = []

    def _advance(self, task: Task, value) -> None:
        try:
            request = task.routine.send(value)
        except StopIteration:
            task.done = True
            logger.debug("Routine %s finished at t=%.3f", task.name, self.time)
            return

        if isinstance(request, Wait):
            task.wake_time = self.time + request.seconds
        else:
            task.wake_time = None
