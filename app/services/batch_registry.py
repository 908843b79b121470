from __future__ import annotations

"""In-process registry of running and finished batches.

Each batch runs on its own background thread with a private event loop
(``asyncio.run``) that drains the scheduler's progress stream. HTTP handlers
only read snapshots and flip cancel tokens.

Settled batches are kept for polling until either the caller releases them or
more than ``keep_finished`` batches have settled, at which point the oldest
settled batch is evicted. Running batches are never evicted.
"""

import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional, Sequence

from engine_errors import BATCH_NOT_FOUND, BatchError
from app import settings
from sim.batch import BatchJob, BatchScheduler, CancelToken
from sim.match_runner import GameSpec, LeagueContext

logger = logging.getLogger(__name__)

DEFAULT_KEEP_FINISHED = 32


@dataclass
class BatchEntry:
    job: BatchJob
    cancel_token: CancelToken
    thread: threading.Thread
    error: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.thread.is_alive()


class BatchRegistry:
    def __init__(self, keep_finished: int = DEFAULT_KEEP_FINISHED) -> None:
        if int(keep_finished) < 1:
            raise ValueError(f"keep_finished must be >= 1 (got {keep_finished!r})")
        self.keep_finished = int(keep_finished)
        self._lock = threading.RLock()
        self._entries: Dict[str, BatchEntry] = {}
        self._finished: Deque[str] = deque()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def start(
        self,
        scheduler: BatchScheduler,
        specs: Sequence[GameSpec],
        context: Optional[LeagueContext] = None,
    ) -> BatchJob:
        job = scheduler.create_job(specs, context)
        token = CancelToken()
        thread = threading.Thread(
            target=self._run,
            args=(scheduler, job, token),
            name=f"sim-batch-{job.batch_id[:8]}",
            daemon=True,
        )
        entry = BatchEntry(job=job, cancel_token=token, thread=thread)
        with self._lock:
            self._entries[job.batch_id] = entry
        thread.start()
        return job

    def _run(self, scheduler: BatchScheduler, job: BatchJob, token: CancelToken) -> None:
        async def _drain() -> None:
            async for _ in scheduler.stream(job, token):
                pass

        try:
            asyncio.run(_drain())
        except Exception as exc:
            logger.warning("BATCH_ABORTED batch_id=%s", job.batch_id, exc_info=True)
            with self._lock:
                entry = self._entries.get(job.batch_id)
                if entry is not None:
                    entry.error = str(exc) or type(exc).__name__
        finally:
            self._settled(job.batch_id)

    def _settled(self, batch_id: str) -> None:
        with self._lock:
            if batch_id not in self._entries:
                return
            self._finished.append(batch_id)
            while len(self._finished) > self.keep_finished:
                old = self._finished.popleft()
                if self._entries.pop(old, None) is not None:
                    logger.info("BATCH_EVICTED batch_id=%s", old)

    def get(self, batch_id: str) -> BatchEntry:
        with self._lock:
            entry = self._entries.get(str(batch_id))
        if entry is None:
            raise BatchError(BATCH_NOT_FOUND, "unknown batch", {"batch_id": batch_id})
        return entry

    def cancel(self, batch_id: str) -> BatchEntry:
        entry = self.get(batch_id)
        entry.cancel_token.cancel()
        return entry

    def release(self, batch_id: str) -> BatchEntry:
        """Drop a batch. A running batch is cancelled first; its thread winds down on its own."""
        entry = self.cancel(batch_id)
        with self._lock:
            self._entries.pop(entry.job.batch_id, None)
            if entry.job.batch_id in self._finished:
                self._finished.remove(entry.job.batch_id)
        logger.info("BATCH_RELEASED batch_id=%s running=%s", entry.job.batch_id, entry.running)
        return entry


registry = BatchRegistry(settings.keep_finished_batches())
