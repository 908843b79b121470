from __future__ import annotations

"""Batch simulation scheduler.

Runs N independent games on a bounded worker pool and streams progress back to
an async caller.

- At most ``max_workers`` games are in flight at any time; the rest wait in a
  queue. Large batches (a full remaining season) therefore never submit
  hundreds of futures at once.
- Each game runs in its own worker with its own GameSimulator, GameResult and
  ``random.Random`` seeded from (batch id, game id). No state is shared between
  games, so results do not depend on scheduling order.
- The BatchJob is the only shared structure. It is written by the event loop
  (single writer) and read by pollers through ``snapshot()`` under a lock.
- A failing game is recorded as ``failed`` and the batch carries on.
- Cancellation stops scheduling new games; games already running finish and
  are reported. Never-started games are marked ``cancelled``.
"""

import asyncio
import logging
import os
import threading
import uuid
from collections import deque
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Deque, Dict, List, Optional, Sequence, Tuple

from badges.catalog import BadgeCatalog
from engine_errors import BATCH_EMPTY, BATCH_INVALID, BatchError
from matchengine.config import DEFAULT_RULES, SimRules

from .match_runner import (
    CANCELLED,
    DONE,
    FAILED,
    PENDING,
    RUNNING,
    GameRunResult,
    GameSpec,
    LeagueContext,
    cancelled_result,
    game_seed,
    run_game_spec,
)

logger = logging.getLogger(__name__)

ExecutorFactory = Callable[[int], Executor]


def default_workers() -> int:
    return max(1, os.cpu_count() or 1)


def thread_pool(max_workers: int) -> Executor:
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sim-batch")


class CancelToken:
    """Thread-safe cancellation flag shared between the caller and the scheduler."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class BatchProgress:
    batch_id: str
    completed: int
    total: int
    failed: int
    cancelled: int = 0
    current_game_id: Optional[str] = None
    # games settled since the previous progress event
    results: Tuple[GameRunResult, ...] = ()

    @property
    def finished(self) -> bool:
        return self.completed + self.cancelled >= self.total

    def to_dict(self, *, include_results: bool = False) -> Dict[str, object]:
        out: Dict[str, object] = {
            "batch_id": self.batch_id,
            "completed": self.completed,
            "total": self.total,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "current_game_id": self.current_game_id,
            "finished": self.finished,
        }
        if include_results:
            out["results"] = [r.to_dict(include_result=False) for r in self.results]
        return out


@dataclass(frozen=True, slots=True)
class BatchSummary:
    batch_id: str
    total: int
    completed: int
    failed: int
    cancelled: int
    results: Tuple[GameRunResult, ...]  # in submission order

    @property
    def succeeded(self) -> Tuple[GameRunResult, ...]:
        return tuple(r for r in self.results if r.status == DONE)

    @property
    def failures(self) -> Tuple[GameRunResult, ...]:
        return tuple(r for r in self.results if r.status == FAILED)

    def to_dict(self, *, include_results: bool = True) -> Dict[str, object]:
        return {
            "batch_id": self.batch_id,
            "total": self.total,
            "completed": self.completed,
            "succeeded": len(self.succeeded),
            "failed": self.failed,
            "cancelled": self.cancelled,
            "results": [r.to_dict(include_result=include_results) for r in self.results],
        }


class BatchJob:
    """Per-batch bookkeeping: statuses, settled results, aggregate counters."""

    def __init__(self, batch_id: str, specs: Sequence[GameSpec], context: Optional[LeagueContext] = None) -> None:
        self.batch_id = str(batch_id)
        self.specs: Tuple[GameSpec, ...] = tuple(specs)
        self.context = context or LeagueContext()
        self._lock = threading.RLock()
        self._status: Dict[str, str] = {s.game_id: PENDING for s in self.specs}
        self._results: Dict[str, GameRunResult] = {}
        self._completed = 0
        self._failed = 0
        self._cancelled = 0
        self._current: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.specs)

    def status_of(self, game_id: str) -> str:
        with self._lock:
            return self._status[game_id]

    def statuses(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._status)

    def mark_running(self, game_id: str) -> None:
        with self._lock:
            self._status[game_id] = RUNNING

    def record(self, result: GameRunResult) -> None:
        with self._lock:
            if self._status.get(result.game_id) in (DONE, FAILED, CANCELLED):
                return
            self._status[result.game_id] = result.status
            self._results[result.game_id] = result
            if result.status == CANCELLED:
                self._cancelled += 1
                return
            self._completed += 1
            if result.status == FAILED:
                self._failed += 1
            self._current = result.game_id

    @property
    def finished(self) -> bool:
        with self._lock:
            return self._completed + self._cancelled >= self.total

    def snapshot(self, results: Sequence[GameRunResult] = ()) -> BatchProgress:
        with self._lock:
            return BatchProgress(
                batch_id=self.batch_id,
                completed=self._completed,
                total=self.total,
                failed=self._failed,
                cancelled=self._cancelled,
                current_game_id=self._current,
                results=tuple(results),
            )

    def summary(self) -> BatchSummary:
        with self._lock:
            ordered = tuple(self._results[s.game_id] for s in self.specs if s.game_id in self._results)
            return BatchSummary(
                batch_id=self.batch_id,
                total=self.total,
                completed=self._completed,
                failed=self._failed,
                cancelled=self._cancelled,
                results=ordered,
            )


class BatchScheduler:
    def __init__(
        self,
        max_workers: Optional[int] = None,
        executor_factory: Optional[ExecutorFactory] = None,
        *,
        rules: SimRules = DEFAULT_RULES,
        catalog: Optional[BadgeCatalog] = None,
    ) -> None:
        workers = int(max_workers) if max_workers else default_workers()
        if workers < 1:
            raise ValueError(f"max_workers must be >= 1 (got {max_workers!r})")
        self.max_workers = workers
        self.executor_factory: ExecutorFactory = executor_factory or thread_pool
        self.rules = rules
        self.catalog = catalog

    def create_job(
        self,
        specs: Sequence[GameSpec],
        context: Optional[LeagueContext] = None,
        *,
        batch_id: Optional[str] = None,
    ) -> BatchJob:
        specs = list(specs or [])
        if not specs:
            raise BatchError(BATCH_EMPTY, "batch has no games to simulate")
        seen = set()
        dupes = []
        for s in specs:
            if s.game_id in seen:
                dupes.append(s.game_id)
            seen.add(s.game_id)
        if dupes:
            raise BatchError(BATCH_INVALID, "duplicate game ids in batch", {"game_ids": sorted(set(dupes))})
        return BatchJob(batch_id or uuid.uuid4().hex, specs, context)

    def run_batch(
        self,
        specs: Sequence[GameSpec],
        context: Optional[LeagueContext] = None,
        cancel_token: Optional[CancelToken] = None,
        *,
        batch_id: Optional[str] = None,
    ) -> AsyncIterator[BatchProgress]:
        """Validate the batch now and return its async progress stream.

        Raises BatchError before anything is scheduled when the batch is empty
        or malformed.
        """
        job = self.create_job(specs, context, batch_id=batch_id)
        return self.stream(job, cancel_token)

    async def stream(self, job: BatchJob, cancel_token: Optional[CancelToken] = None) -> AsyncIterator[BatchProgress]:
        cancel = cancel_token or CancelToken()
        loop = asyncio.get_running_loop()
        queue: Deque[GameSpec] = deque(job.specs)
        order = {s.game_id: i for i, s in enumerate(job.specs)}
        in_flight: Dict[asyncio.Future, GameSpec] = {}
        carry: List[GameRunResult] = []
        executor = self.executor_factory(self.max_workers)
        clean_exit = False

        logger.info(
            "BATCH_START batch_id=%s games=%d workers=%d season_id=%s",
            job.batch_id, job.total, self.max_workers, job.context.season_id,
        )
        try:
            while queue or in_flight:
                while queue and len(in_flight) < self.max_workers and not cancel.cancelled:
                    spec = queue.popleft()
                    job.mark_running(spec.game_id)
                    fut = loop.run_in_executor(
                        executor, run_game_spec, spec, job.batch_id, job.context, self.rules, self.catalog
                    )
                    in_flight[fut] = spec

                if cancel.cancelled and queue:
                    for spec in queue:
                        res = cancelled_result(job.batch_id, spec)
                        job.record(res)
                        carry.append(res)
                    queue.clear()

                if not in_flight:
                    if carry:
                        yield job.snapshot(carry)
                        carry = []
                    break

                done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                settled: List[GameRunResult] = []
                for fut in sorted(done, key=lambda f: order[in_flight[f].game_id]):
                    spec = in_flight.pop(fut)
                    settled.append(self._settle(job, spec, fut))
                for res in settled:
                    job.record(res)
                yield job.snapshot(carry + settled)
                carry = []
            clean_exit = True
        finally:
            executor.shutdown(wait=clean_exit, cancel_futures=not clean_exit)

        summary = job.summary()
        logger.info(
            "BATCH_DONE batch_id=%s completed=%d failed=%d cancelled=%d",
            job.batch_id, summary.completed, summary.failed, summary.cancelled,
        )

    @staticmethod
    def _settle(job: BatchJob, spec: GameSpec, fut: asyncio.Future) -> GameRunResult:
        try:
            return fut.result()
        except Exception as exc:  # worker crash or unpicklable payload
            logger.warning(
                "BATCH_GAME_FAILED batch_id=%s game_id=%s", job.batch_id, spec.game_id, exc_info=True
            )
            return GameRunResult(
                game_id=spec.game_id,
                status=FAILED,
                seed=game_seed(job.batch_id, spec),
                error={"code": type(exc).__name__, "message": str(exc), "details": None},
            )

    async def run_batch_to_completion(
        self,
        specs: Sequence[GameSpec],
        context: Optional[LeagueContext] = None,
        cancel_token: Optional[CancelToken] = None,
        *,
        batch_id: Optional[str] = None,
        on_progress: Optional[Callable[[BatchProgress], None]] = None,
    ) -> BatchSummary:
        job = self.create_job(specs, context, batch_id=batch_id)
        async for progress in self.stream(job, cancel_token):
            if on_progress is not None:
                on_progress(progress)
        return job.summary()
