"""
Background synthesis runner.

Drains queued synthesis jobs in the app's event loop. The route search
itself runs in a worker thread (see SynthesisService.run_job).
"""

import asyncio
import logging
from collections import deque
from typing import Optional

from volt.config import settings
from .repository import SynthesisJobRepository
from .service import SynthesisService

logger = logging.getLogger(__name__)


# =============================================================================
# Job Queue Manager
# =============================================================================

class JobQueueManager:
    """
    FIFO of job ids with an in-progress set.

    A job id is never queued twice and never queued while it runs.
    """

    def __init__(self):
        self._queue: deque[str] = deque()
        self._in_progress: set[str] = set()
        self._lock = asyncio.Lock()

    async def add_job(self, job_id: str) -> bool:
        """Add job to queue. Returns False if already queued or running."""
        async with self._lock:
            if job_id in self._queue or job_id in self._in_progress:
                return False
            self._queue.append(job_id)
            logger.debug(f"Added job {job_id} to synthesis queue")
            return True

    async def get_next_job(self) -> Optional[str]:
        async with self._lock:
            if not self._queue:
                return None
            job_id = self._queue.popleft()
            self._in_progress.add(job_id)
            return job_id

    async def mark_complete(self, job_id: str):
        async with self._lock:
            self._in_progress.discard(job_id)

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    @property
    def in_progress_count(self) -> int:
        return len(self._in_progress)


# =============================================================================
# Background Runner
# =============================================================================

class BackgroundSynthesisRunner:
    """
    Background task runner for synthesis jobs.

    Queue and wake-up event are created in `start()` so they belong to the
    loop the runner is started on.

    Usage:
        runner = BackgroundSynthesisRunner()
        await runner.start(db_factory)
        await runner.submit(job_id)
        # ... later ...
        await runner.stop()
    """

    def __init__(self):
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._db_factory = None
        self._wakeup: Optional[asyncio.Event] = None
        self.queue: Optional[JobQueueManager] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, db_factory):
        """Start the loop and re-queue jobs left unfinished by a previous run."""
        if self._running:
            return

        self._db_factory = db_factory
        self._wakeup = asyncio.Event()
        self.queue = JobQueueManager()
        self._running = True

        await self._requeue_unfinished()
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Background synthesis started")

    async def stop(self):
        """Stop the loop. A job in flight is abandoned and re-queued on next start."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Background synthesis stopped")

    async def submit(self, job_id: str) -> bool:
        """
        Queue a job for execution.

        Returns False when the runner is not started; the job stays queued
        in the database and is picked up on the next start.
        """
        if not self._running or self.queue is None:
            logger.warning(f"Synthesis runner not running, job {job_id} left queued")
            return False
        added = await self.queue.add_job(job_id)
        self._wakeup.set()
        return added

    async def _run_loop(self):
        while self._running:
            try:
                await self._process_queue()
            except Exception as e:
                logger.error(f"Synthesis loop error: {e}")

            try:
                await asyncio.wait_for(
                    self._wakeup.wait(),
                    timeout=settings.synthesis_poll_interval_seconds,
                )
            except asyncio.TimeoutError:
                pass
            self._wakeup.clear()

    async def _process_queue(self):
        while self._running:
            job_id = await self.queue.get_next_job()
            if job_id is None:
                return
            try:
                async with self._db_factory() as db:
                    await SynthesisService(db).run_job(job_id)
            except Exception as e:
                logger.error(f"Error running synthesis job {job_id}: {e}")
            finally:
                await self.queue.mark_complete(job_id)

    async def _requeue_unfinished(self):
        async with self._db_factory() as db:
            jobs = await SynthesisJobRepository(db).list_unfinished()
        for job in jobs:
            await self.queue.add_job(job.id)
        if jobs:
            logger.info(f"Re-queued {len(jobs)} unfinished synthesis jobs")


# Global runner instance
synthesis_runner = BackgroundSynthesisRunner()
