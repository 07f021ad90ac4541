"""
Cooperative scheduler.

A single source of time for the whole game. Timers are keyed by name (one
per name at a time) and carry a cancellation token; background jobs run on
an executor but their results are delivered on the caller's thread, inside
advance(). A callback whose token has been cancelled never runs.
"""

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Shared flag that invalidates every timer and job created under it."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@dataclass(order=True)
class _Timer:
    due: float
    seq: int
    name: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False)
    token: CancellationToken | None = field(compare=False, default=None)


@dataclass
class _Job:
    name: str
    future: Future
    on_done: Callable[[Any], None]
    on_error: Callable[[BaseException], None] | None = None
    token: CancellationToken | None = None


class Scheduler:
    """
    Discrete-time event scheduler.

    Time only moves when advance() is called, so tests drive it as a fake
    clock and the CLI drives it from the wall clock.
    """

    def __init__(self, executor: Executor | None = None):
        self.executor = executor or InlineExecutor()
        self.now: float = 0.0
        self._timers: dict[str, _Timer] = {}
        self._jobs: list[_Job] = []
        self._seq = 0

    # =========================================================================
    # Timers
    # =========================================================================

    def call_later(
        self,
        name: str,
        delay: float,
        callback: Callable[[], None],
        token: CancellationToken | None = None,
    ) -> None:
        """Schedule `callback` after `delay` seconds, replacing any timer with the same name."""
        self._seq += 1
        self._timers[name] = _Timer(
            due=self.now + max(0.0, delay),
            seq=self._seq,
            name=name,
            callback=callback,
            token=token,
        )
        logger.debug(f"Timer '{name}' due at t={self.now + max(0.0, delay):.2f}")

    def cancel(self, name: str) -> bool:
        """Cancel a timer by name. Returns True if one was pending."""
        return self._timers.pop(name, None) is not None

    def is_scheduled(self, name: str) -> bool:
        return name in self._timers

    def remaining(self, name: str) -> float | None:
        """Seconds until a named timer fires, or None if not scheduled."""
        timer = self._timers.get(name)
        if timer is None:
            return None
        return max(0.0, timer.due - self.now)

    @property
    def pending_timers(self) -> list[str]:
        """Names of scheduled timers in firing order."""
        return [t.name for t in sorted(self._timers.values())]

    # =========================================================================
    # Background jobs
    # =========================================================================

    def submit(
        self,
        name: str,
        fn: Callable[[], Any],
        on_done: Callable[[Any], None],
        token: CancellationToken | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        """Run `fn` on the executor and deliver its result to `on_done` during advance()."""
        future = self.executor.submit(fn)
        self._jobs.append(_Job(name=name, future=future, on_done=on_done, on_error=on_error, token=token))
        logger.debug(f"Job '{name}' submitted")

    def has_job(self, name: str) -> bool:
        """Whether a job with this name is still waiting to be delivered."""
        return any(job.name == name for job in self._jobs)

    @property
    def pending_jobs(self) -> list[str]:
        return [job.name for job in self._jobs]

    def cancel_all(self) -> None:
        """Drop every timer and every undelivered job."""
        for job in self._jobs:
            job.future.cancel()
        self._timers.clear()
        self._jobs.clear()

    # =========================================================================
    # Driving time
    # =========================================================================

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing due timers in order and delivering finished jobs.

        Returns:
            Number of timer callbacks that ran
        """
        target = self.now + max(0.0, seconds)
        fired = 0

        while True:
            self._deliver_jobs()

            due = [t for t in self._timers.values() if t.due <= target]
            if not due:
                break

            timer = min(due)
            del self._timers[timer.name]
            self.now = max(self.now, timer.due)

            if timer.token is not None and timer.token.cancelled:
                logger.debug(f"Skipping stale timer '{timer.name}'")
                continue

            timer.callback()
            fired += 1

        self.now = target
        return fired

    def _deliver_jobs(self) -> None:
        finished = [job for job in self._jobs if job.future.done()]
        if not finished:
            return
        self._jobs = [job for job in self._jobs if not job.future.done()]

        for job in finished:
            if job.future.cancelled():
                continue
            if job.token is not None and job.token.cancelled:
                logger.warning(f"Discarding stale result of job '{job.name}'")
                continue

            error = job.future.exception()
            if error is not None:
                if job.on_error is None:
                    logger.error(f"Job '{job.name}' failed: {error}")
                else:
                    job.on_error(error)
                continue

            job.on_done(job.future.result())
