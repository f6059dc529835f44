"""Window buffering utilities for streaming pipelines."""

from __future__ import annotations

from collections import deque
from typing import Tuple

from ..errors import ConfigurationError


class WindowBuffer:
    """Fixed-capacity FIFO holding the most recent observations in arrival order."""

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise ConfigurationError(f"capacity must be an integer (got {capacity!r})")
        if capacity < 1:
            raise ConfigurationError(f"Invalid setsize: capacity must be positive (got {capacity})")
        self.capacity = capacity
        self._buffer: deque[float] = deque(maxlen=capacity)

    def admit(self, value: float) -> None:
        # deque(maxlen=...) drops the oldest entry when full
        self._buffer.append(float(value))

    def is_full(self) -> bool:
        return len(self._buffer) == self.capacity

    def snapshot(self) -> Tuple[float, ...]:
        """Return the contents oldest to newest."""

        return tuple(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)
