"""Run a callable on a daemon thread and hand back a Future for its result."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def start_deferred(
    fn: Callable[..., T],
    *,
    name: str,
    kwargs: dict[str, Any] | None = None,
) -> Future[T]:
    """Start ``fn(**kwargs)`` on a new daemon thread.

    The returned future resolves with the return value, or carries the
    exception if ``fn`` raised. Callers poll ``done()`` or block on
    ``result()``.
    """

    future: Future[T] = Future()

    thread = threading.Thread(
        target=_run,
        name=name,
        daemon=True,
        kwargs={"fn": fn, "future": future, "kwargs": kwargs or {}},
    )
    thread.start()
    return future


def _run(*, fn: Callable[..., T], future: Future[T], kwargs: dict[str, Any]) -> None:
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = fn(**kwargs)
    except BaseException as e:
        logger.exception("Deferred task failed", extra={"thread_name": threading.current_thread().name})
        future.set_exception(e)
    else:
        future.set_result(result)
