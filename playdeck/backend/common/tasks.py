"""Lightweight background task execution with retries."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass
from typing import Callable, Any, Optional
import threading
import time

from playdeck.backend.common.errors import TaskError
from playdeck.backend.common.logging import get_logger

log = get_logger(__name__)


@dataclass
class TaskSpec:
    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: Optional[dict[str, Any]] = None
    retries: int = 0
    backoff_sec: float = 0.5
    name: str = "task"
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def __post_init__(self):
        if self.kwargs is None:
            self.kwargs = {}


class TaskRunner:
    """Tiny in-process task runner with retries/backoff."""
    def __init__(self, max_workers: int = 2, *, context: Optional[str] = None):
        self._context = context or "task_runner"
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix=f"playdeck-{self._context}",
        )
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, spec: TaskSpec) -> Future:
        if self._closed:
            raise TaskError("TaskRunner is closed")

        def _wrapped():
            attempt = 0
            while True:
                try:
                    log.debug("task_start", extra={"task": spec.name, "attempt": attempt})
                    result = spec.fn(*spec.args, **spec.kwargs)
                    log.debug("task_done", extra={"task": spec.name, "attempt": attempt})
                    return result
                except spec.retry_on as e:
                    if attempt >= spec.retries:
                        log.error("task_fail", extra={"task": spec.name, "attempt": attempt, "error": str(e)})
                        raise
                    sleep_for = spec.backoff_sec * (2 ** attempt)
                    log.warning(
                        "task_retry",
                        extra={"task": spec.name, "attempt": attempt, "sleep_for": sleep_for, "error": str(e)},
                    )
                    time.sleep(sleep_for)
                    attempt += 1

        return self._executor.submit(_wrapped)

    def close(self, wait: bool = True) -> None:
        with self._lock:
            if not self._closed:
                self._executor.shutdown(wait=wait, cancel_futures=not wait)
                self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close(wait=True)
