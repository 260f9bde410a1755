"""Executor factory used to fan module versions out during site builds."""

from __future__ import annotations

from concurrent import futures
from typing import Optional, Tuple

Executor = futures.Executor


def create_executor(workers: int, *, name: str = "stardoc-build") -> Tuple[Optional[Executor], bool]:
    """
    Return a thread pool for IO-bound version builds.

    Version builds spend their time downloading archives, so threads suffice;
    ``workers <= 1`` means run inline.

    Args:
        workers: Desired concurrency level.
        name: Thread name prefix (shows up in log records and debuggers).

    Returns:
        Tuple of (executor, needs_shutdown). Caller is responsible for shutting
        down the returned executor when ``needs_shutdown`` is ``True``.
    """
    if workers <= 1:
        return None, False
    return futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name), True
