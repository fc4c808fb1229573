"""
"Still relevant" guard for loads.

A view that starts a load takes a LoadGuard and cancels it when it goes
away (or starts a newer load). When the load finishes, guarded() hands
back the result only if the guard is still active; otherwise the result
is discarded. The underlying request is not aborted.
"""

from __future__ import annotations

from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")


class LoadGuard:
    def __init__(self) -> None:
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False


class LatestLoad:
    """
    Hands out guards so that only the most recent load stays relevant,
    e.g. when filters change while a list is still loading.
    """

    def __init__(self) -> None:
        self._current: Optional[LoadGuard] = None

    def start(self) -> LoadGuard:
        if self._current is not None:
            self._current.cancel()
        self._current = LoadGuard()
        return self._current

    def close(self) -> None:
        if self._current is not None:
            self._current.cancel()
            self._current = None


async def guarded(guard: LoadGuard, awaitable: Awaitable[T]) -> Optional[T]:
    """
    Await awaitable; return its result, or None if guard was cancelled
    meanwhile. Errors of a stale load are discarded too.
    """
    try:
        result = await awaitable
    except Exception:
        if not guard.active:
            return None
        raise
    if not guard.active:
        return None
    return result
