"""Timer driven loop running the passes of a reconciler."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .utils.context import PassContext, sync_pass
from .utils.errors import sanitize_exception

logger = logging.getLogger(__name__)


@dataclass
class Job:
    """A pass run periodically.

    Attributes:
        name: Name used in logs
        run: Pass to run
        interval: Delay between two passes, in seconds
        retry_interval: Delay after a failed pass, defaults to interval
        run_at_start: Run the pass as soon as the loop starts
    """

    name: str
    run: Callable[[PassContext], None]
    interval: float
    retry_interval: Optional[float] = None
    run_at_start: bool = False

    def next_delay(self, succeeded: bool) -> float:
        if succeeded or self.retry_interval is None:
            return self.interval
        return self.retry_interval


class ReconcilerRunner:
    """Run the jobs of one reconciler, one pass at a time.

    The loop sleeps until the next job is due or the stop event is set. A pass
    runs in a worker thread bounded by its own deadline; a stop requested
    during a pass is only observed once the pass returns.
    """

    def __init__(self, name: str, jobs: list[Job], sync_timeout: float) -> None:
        self.name = name
        self.jobs = jobs
        self.sync_timeout = sync_timeout

    async def run(self, stop: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        now = loop.time()
        due = [now if job.run_at_start else now + job.interval for job in self.jobs]

        logger.info(f"Starting {self.name} reconciler")
        while not stop.is_set():
            index = min(range(len(self.jobs)), key=lambda i: due[i])
            job = self.jobs[index]

            delay = max(0.0, due[index] - loop.time())
            try:
                await asyncio.wait_for(stop.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

            succeeded = await asyncio.to_thread(self.run_pass, job)
            due[index] = loop.time() + job.next_delay(succeeded)

        logger.info(f"Stopping {self.name} reconciler")

    def run_pass(self, job: Job) -> bool:
        """Run a pass of a job under a fresh deadline.

        Returns:
            Whether the pass succeeded
        """
        with sync_pass(self.sync_timeout) as ctx:
            try:
                job.run(ctx)
            except Exception as e:
                logger.error(f"{self.name} {job.name} pass failed: {sanitize_exception(e)}")
                return False
        return True
