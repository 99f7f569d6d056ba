"""
docsync/services/execution.py

Run deadline and bounded per-item task execution.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import TypeVar

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class RunDeadline:
    """
    Overall run deadline measured on an injectable monotonic clock.

    A ``timeout_seconds`` of None means the run never expires. Once a stage
    gives up on unfinished items it calls ``cancel``; from then on the deadline
    reads as expired for every worker, whatever the clock says.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._expires_at = clock() + timeout_seconds if timeout_seconds is not None else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def remaining(self) -> float | None:
        if self._cancelled.is_set():
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def sleep(self, seconds: float, sleep: Callable[[float], None] = time.sleep) -> bool:
        """
        Sleep for ``seconds`` without overrunning the deadline.

        Returns False when the deadline was reached instead.
        """

        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            if remaining > 0:
                sleep(remaining)
            return False
        if seconds > 0:
            sleep(seconds)
        return not self.expired()


def run_per_item(
    items: Sequence[ItemT],
    worker: Callable[[ItemT], ResultT],
    on_timeout: Callable[[ItemT], ResultT],
    *,
    max_workers: int,
    deadline: RunDeadline,
    name: str,
) -> list[ResultT]:
    """
    Run ``worker`` once per item on a bounded pool and return results in
    input order.

    Each task writes only its own slot. Items still pending or running when
    the deadline expires get ``on_timeout(item)`` instead, and the deadline is
    cancelled so abandoned workers see it as expired before any further side
    effect. ``worker`` must not raise.
    """

    if not items:
        return []

    results: list[ResultT | None] = [None] * len(items)
    executor = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(items))),
        thread_name_prefix=f"docsync-{name}",
    )
    try:
        futures: dict[Future[ResultT], int] = {
            executor.submit(worker, item): index for index, item in enumerate(items)
        }
        done, pending = wait(futures, timeout=deadline.remaining())
        for future in done:
            results[futures[future]] = future.result()
        if pending:
            deadline.cancel()
            logger.warning(
                "Run deadline reached stage=%s unfinished=%s",
                name,
                len(pending),
            )
        for future in pending:
            future.cancel()
            index = futures[future]
            results[index] = on_timeout(items[index])
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return [result for result in results if result is not None]
