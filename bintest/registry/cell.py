"""A process-wide value that is computed at most once."""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class OnceCell(Generic[T]):
    """
    Holds a value produced by the first successful get_or_init() call.

    Concurrent callers block while the first one runs its factory and then
    see its value. If the factory raises, the cell stays empty and the
    next caller runs its own factory.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._set = False

    def get(self) -> Optional[T]:
        """The stored value, or None while the cell is empty."""
        return self._value if self._set else None

    def get_or_init(self, factory: Callable[[], T]) -> T:
        if self._set:
            return self._value  # type: ignore[return-value]

        with self._lock:
            if not self._set:
                self._value = factory()
                self._set = True
        return self._value  # type: ignore[return-value]
