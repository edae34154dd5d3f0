"""Per-key request deduplication."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class RequestDeduplicator(Generic[T]):
    """Keeps at most one running task per key.

    A second ``run`` for a key whose task is still pending gets the very same
    task back and its factory is never called. The key is released as soon
    as the task finishes, whatever the outcome, so the next ``run`` starts a
    fresh task.

    Callers sharing a task should await it through ``asyncio.shield`` so
    that one caller going away does not cancel the others.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[T]] = {}

    def run(
        self,
        key: str,
        factory: Callable[[], Coroutine[Any, Any, T]],
    ) -> asyncio.Task[T]:
        existing = self._in_flight.get(key)
        if existing is not None:
            return existing

        task = asyncio.ensure_future(factory())
        self._in_flight[key] = task
        task.add_done_callback(lambda done: self._release(key, done))
        return task

    def _release(self, key: str, task: asyncio.Task[T]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)
