"""Daily retention scheduler"""

import threading
from datetime import datetime, timedelta
from typing import List, Optional

from auditor.core.process_config import ProcessConfig
from auditor.core.types import Task


def seconds_until_midnight(now: Optional[datetime] = None) -> float:
    """Seconds from now until the next local midnight"""
    now = now or datetime.now()
    next_run = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return (next_run - now).total_seconds()


class RetentionScheduler:
    """Runs registered tasks once a day at local midnight.

    The next run is scheduled whether or not the previous tasks succeeded.
    """

    def __init__(self, config: ProcessConfig):
        self.config = config
        self.tasks: List[Task] = []
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def timer(self) -> Optional[threading.Timer]:
        return self._timer

    def add_task(self, task: Task) -> None:
        self.tasks.append(task)

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
        self._schedule_next()
        self.config.logger.info("audit_retention_schedule_started", tasks=len(self.tasks))

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def run_pending(self) -> None:
        """Run every task now, each in its own error boundary"""
        for task in list(self.tasks):
            try:
                task()
            except Exception as e:
                self.config.logger.error(
                    "audit_scheduled_task_failed",
                    task=getattr(task, "__name__", repr(task)),
                    error=str(e),
                )

    def _schedule_next(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._timer = threading.Timer(seconds_until_midnight(), self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        try:
            self.run_pending()
        finally:
            self._schedule_next()
