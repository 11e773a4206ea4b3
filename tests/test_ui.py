from __future__ import annotations

from decimal import Decimal
import math
from types import SimpleNamespace

import pytest

pytest.importorskip("tkinter")

from fenzi_table.config import TableConfig
from fenzi_table.ledger import EXPENSE, Entry
from fenzi_table.slots import assign_slots
from fenzi_table.ui import CalloutWindow, TableCanvas


class FakeToplevel:
    def __init__(self) -> None:
        self.under = None

    def winfo_containing(self, x: int, y: int):
        return self.under

    def winfo_toplevel(self):
        return self


class FakeWidget:
    def __init__(self, top) -> None:
        self.top = top

    def winfo_toplevel(self):
        return self.top


def _callout() -> tuple[CalloutWindow, FakeToplevel, list[str]]:
    window = CalloutWindow(None, TableConfig())
    tw = FakeToplevel()
    window._tw = tw
    left: list[str] = []
    window.on_leave = lambda: left.append("leave")
    return window, tw, left


def test_callout_moving_between_children_is_not_leaving() -> None:
    window, tw, left = _callout()
    event = SimpleNamespace(x_root=410, y_root=220)

    tw.under = FakeWidget(tw)
    window._on_leave(event)
    tw.under = tw
    window._on_leave(event)
    assert left == []


def test_callout_leave_outside_the_window() -> None:
    window, tw, left = _callout()
    event = SimpleNamespace(x_root=900, y_root=20)

    tw.under = None
    window._on_leave(event)
    tw.under = FakeWidget(FakeToplevel())
    window._on_leave(event)
    assert left == ["leave", "leave"]


def test_callout_leave_after_hide_is_ignored() -> None:
    window, _tw, left = _callout()
    window._tw = None
    window._on_leave(SimpleNamespace(x_root=0, y_root=0))
    assert left == []


class RecordingCanvas(TableCanvas):
    """TableCanvas drawing into a dict instead of a Tk widget."""

    def __init__(self, config: TableConfig) -> None:
        self.table_config = config
        self.entered: list[str] = []
        self.on_anchor_enter = self.entered.append
        self.on_anchor_leave = lambda eid: None
        self.on_geometry_change = lambda: None
        self._origin = (0.0, 0.0)
        self._index = {}
        self._angles = {}
        self._plate_items = {}
        self._hovered = None

        self.items: dict[int, list[float]] = {}
        self.created = 0
        self.reshaped: list[int] = []
        self.raised: list[str] = []
        self.bindings: dict[tuple[str, str], object] = {}

    def _current_center(self):
        return (300.0, 300.0)

    def delete(self, *tags) -> None:
        self.items.clear()

    def _create(self, coords) -> int:
        self.created += 1
        self.items[self.created] = list(coords)
        return self.created

    def create_oval(self, *coords, **kw) -> int:
        return self._create(coords)

    def create_polygon(self, *coords, **kw) -> int:
        return self._create(coords)

    def coords(self, item, *coords) -> None:
        self.items[item] = list(coords)
        self.reshaped.append(item)

    def tag_raise(self, tag) -> None:
        self.raised.append(tag)

    def tag_bind(self, tag, sequence, func) -> None:
        self.bindings[(tag, sequence)] = func


def _table(*ids: str) -> RecordingCanvas:
    entries = [
        Entry(entry_id=eid, person=f"Person {eid}", amount=Decimal("888"), type=EXPENSE, date="2024-02-10")
        for eid in ids
    ]
    canvas = RecordingCanvas(TableConfig())
    canvas.render(entries, assign_slots(entries))
    return canvas


def _plate_radius(canvas: RecordingCanvas, entry_id: str, center: tuple[float, float]) -> float:
    disc, _points = canvas._plate_items[entry_id][0]
    flat = canvas.items[disc]
    cx, cy = center
    distances = {round(math.hypot(x - cx, y - cy), 6) for x, y in zip(flat[::2], flat[1::2])}
    assert len(distances) == 1
    return distances.pop()


def test_plate_tags_use_seat_index_not_entry_id() -> None:
    canvas = _table("a b", "x&&y")
    assert canvas.plate_tag("a b") == "plate-0"
    assert canvas.plate_tag("x&&y") == "plate-1"
    assert canvas.plate_tag("unknown") == "plate-none"

    canvas.bindings[("plate-1", "<Enter>")](None)
    assert canvas.entered == ["x&&y"]


def test_hovered_plate_is_reshaped_in_place() -> None:
    canvas = _table("a", "b")
    created = canvas.created
    # seat a at 0 degrees, seat b at 180 degrees, table centered on (300, 300)
    assert _plate_radius(canvas, "a", (432, 300)) == pytest.approx(48)

    canvas.set_hovered("a")
    assert canvas.created == created
    assert sorted(canvas.reshaped) == sorted(item for item, _ in canvas._plate_items["a"])
    assert _plate_radius(canvas, "a", (432, 300)) == pytest.approx(52.8)
    assert canvas.raised == ["seat-0"]

    canvas.reshaped.clear()
    canvas.set_hovered("a")
    assert canvas.reshaped == []

    canvas.set_hovered("b")
    assert _plate_radius(canvas, "a", (432, 300)) == pytest.approx(48)
    assert _plate_radius(canvas, "b", (168, 300)) == pytest.approx(52.8)
    assert canvas.raised == ["seat-0", "seat-1"]

    canvas.set_hovered(None)
    assert _plate_radius(canvas, "b", (168, 300)) == pytest.approx(48)
    assert canvas.created == created
