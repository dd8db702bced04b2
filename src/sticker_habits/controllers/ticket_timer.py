# controllers/ticket_timer.py
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Protocol

from sticker_habits.errors import HabitStoreError

logger = logging.getLogger(__name__)

class TkApp(Protocol):
    def after(self, ms: int, func: Callable[[], None]) -> str: ...
    def after_cancel(self, handle: str) -> None: ...

@dataclass
class _Job:
    delay_ms: int
    fn: Callable[[], None]
    after_id: Optional[str] = None
    running: bool = False


class Repeater:
    """
    Scheduler for any host loop with tkinter-style ``after``/``after_cancel``.
    Usage:
        ui = Repeater(root)
        ui.every(60_000, tick_fn)
        ...
        ui.stop_all()
    """
    def __init__(self, root: TkApp):
        self.root = root
        self._jobs: Dict[int, _Job] = {}
        self._next_id = 1

    def every(self, delay_ms: int, fn: Callable[[], None]) -> int:
        job_id = self._next_id
        self._next_id += 1
        self._jobs[job_id] = _Job(delay_ms=delay_ms, fn=fn, running=True)
        self._tick(job_id)  # first run happens immediately
        return job_id

    def cancel(self, job_id: int) -> None:
        job = self._jobs.pop(job_id, None)
        if not job:
            return
        job.running = False
        if job.after_id is not None:
            self.root.after_cancel(job.after_id)
            job.after_id = None

    def stop_all(self) -> None:
        for job_id in list(self._jobs.keys()):
            self.cancel(job_id)

    def _tick(self, job_id: int) -> None:
        job = self._jobs.get(job_id)
        if not job or not job.running:
            return

        try:
            job.fn()
        finally:
            # schedule next tick no matter what; exceptions should not kill the loop
            if job.running:
                job.after_id = self.root.after(job.delay_ms, lambda: self._tick(job_id))


class DailyTicketTimer:
    """Runs ``store.tick`` at start and then every ``interval_seconds``."""

    def __init__(self, store, repeater: Optional[Repeater] = None, interval_seconds: int = 60,
                 clock: Callable[[], datetime] = datetime.now,
                 on_granted: Optional[Callable[[], None]] = None):
        self.store = store
        self.repeater = repeater
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.on_granted = on_granted
        self.job_id: Optional[int] = None

    def check(self) -> None:
        try:
            granted = self.store.tick(self.clock())
        except HabitStoreError as e:
            # next check retries
            logger.error("Daily ticket check failed: %s", e)
            return
        if granted and self.on_granted:
            self.on_granted()

    def start(self) -> None:
        if self.repeater is None:
            raise RuntimeError("DailyTicketTimer.start needs a Repeater; use run_blocking without one.")
        if self.job_id is None:
            self.job_id = self.repeater.every(self.interval_seconds * 1000, self.check)

    def stop(self) -> None:
        if self.job_id is not None:
            self.repeater.cancel(self.job_id)
            self.job_id = None

    def run_blocking(self, stop_event: threading.Event) -> None:
        every(self.interval_seconds, self.check, stop_event)


def every(delay: float, task: Callable[[], None], stop_event: threading.Event) -> None:
    """Blocking loop for hosts without an event loop; runs ``task`` first, then every ``delay`` seconds."""
    while not stop_event.is_set():
        task()
        stop_event.wait(delay)
