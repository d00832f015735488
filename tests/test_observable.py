from __future__ import annotations

import sys
from pathlib import Path

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest

from pageable.observable import Observable


class Point(Observable):
    _published = ("x", "y")
    _events = ("moved",)

    def __init__(self) -> None:
        super().__init__()
        self._init_fields({"x": 0, "y": 0})

    @property
    def x(self) -> int:
        return self._value("x")

    @property
    def y(self) -> int:
        return self._value("y")

    def move(self, x: int, y: int) -> list[str]:
        changed = self._publish_many([("x", x), ("y", y)])
        self._emit("moved", (x, y))
        return changed


def test_unknown_field_rejected() -> None:
    with pytest.raises(KeyError):
        Point().subscribe("z", print)


def test_publish_many_notifies_after_all_writes() -> None:
    p = Point()
    seen: list[tuple[int, int]] = []
    p.subscribe("x", lambda _x: seen.append((p.x, p.y)))

    assert p.move(1, 2) == ["x", "y"]
    assert seen == [(1, 2)]


def test_equal_value_is_silent() -> None:
    p = Point()
    xs: list[int] = []
    p.subscribe("x", xs.append)

    assert p.move(0, 5) == ["y"]
    assert xs == []


def test_events_fire_every_time() -> None:
    p = Point()
    moves: list[tuple[int, int]] = []
    p.subscribe("moved", moves.append)

    p.move(1, 1)
    p.move(1, 1)
    assert moves == [(1, 1), (1, 1)]


def test_callback_may_cancel_itself() -> None:
    p = Point()
    calls: list[int] = []

    def once(value: int) -> None:
        calls.append(value)
        sub.cancel()

    sub = p.subscribe("x", once)
    p.move(1, 0)
    p.move(2, 0)
    assert calls == [1]


def test_same_callback_twice_is_two_subscriptions() -> None:
    p = Point()
    xs: list[int] = []
    first = p.subscribe("x", xs.append)
    p.subscribe("x", xs.append)

    first.cancel()
    p.move(3, 0)
    assert xs == [3]
