from __future__ import annotations

"""Runtime settings for the HTTP layer, read from the environment.

SIM_MAX_WORKERS    batch worker pool size (default: os.cpu_count())
SIM_USE_PROCESSES  "1" to run batch games in a process pool instead of threads
SIM_KEEP_FINISHED_BATCHES  settled batches kept for polling (default: 32)
"""

import os
from concurrent.futures import Executor, ProcessPoolExecutor

from sim.batch import BatchScheduler, default_workers, thread_pool


def _positive_int_env(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer (got {raw!r})") from e
    if value < 1:
        raise RuntimeError(f"{name} must be >= 1 (got {value})")
    return value


def max_workers() -> int:
    return _positive_int_env("SIM_MAX_WORKERS", default_workers())


def keep_finished_batches() -> int:
    return _positive_int_env("SIM_KEEP_FINISHED_BATCHES", 32)


def use_processes() -> bool:
    return (os.environ.get("SIM_USE_PROCESSES") or "").strip().lower() in {"1", "true", "yes"}


def process_pool(workers: int) -> Executor:
    return ProcessPoolExecutor(max_workers=workers)


def build_scheduler() -> BatchScheduler:
    factory = process_pool if use_processes() else thread_pool
    return BatchScheduler(max_workers=max_workers(), executor_factory=factory)
