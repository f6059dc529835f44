from __future__ import annotations

import pytest

from rolling_mad import ConfigurationError, WindowBuffer


def test_window_buffer_fills_in_arrival_order() -> None:
    buffer = WindowBuffer(3)
    buffer.admit(1.0)
    buffer.admit(2.0)
    assert not buffer.is_full()
    assert buffer.snapshot() == (1.0, 2.0)
    buffer.admit(3.0)
    assert buffer.is_full()
    assert buffer.snapshot() == (1.0, 2.0, 3.0)


def test_window_buffer_evicts_oldest_once_full() -> None:
    buffer = WindowBuffer(3)
    for value in [1.0, 2.0, 3.0, 4.0, 5.0]:
        buffer.admit(value)
    assert len(buffer) == 3
    assert buffer.is_full()
    assert buffer.snapshot() == (3.0, 4.0, 5.0)


def test_window_buffer_snapshot_is_detached() -> None:
    buffer = WindowBuffer(2)
    buffer.admit(1.0)
    snap = buffer.snapshot()
    buffer.admit(2.0)
    assert snap == (1.0,)
    assert buffer.snapshot() == (1.0, 2.0)


@pytest.mark.parametrize("capacity", [0, -3, 2.5, True])
def test_window_buffer_rejects_invalid_capacity(capacity) -> None:
    with pytest.raises(ConfigurationError):
        WindowBuffer(capacity)
