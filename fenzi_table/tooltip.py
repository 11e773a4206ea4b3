"""Hover tracking and callout placement for place settings.

The positioner does not know about any widget toolkit. It is handed:

* ``measure(entry_id) -> Rect | None``: the anchor's current screen rectangle,
  or ``None`` while the anchor is not on screen,
* an overlay with ``show(placement, entry)`` and ``hide()`` that renders on a
  top-level surface outside the table's own widget,
* ``schedule(fn)``: runs ``fn`` before the next paint (Tk ``after_idle``).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Sequence

from fenzi_table.geometry import Rect
from fenzi_table.ledger import Entry
from fenzi_table.slots import LEFT, LayoutSlot, side_of


logger = logging.getLogger(__name__)

DEFAULT_PADDING = 10.0


@dataclass(frozen=True)
class CalloutPlacement:
    entry_id: str
    x: float  # anchor edge the callout hangs off
    y: float  # vertical center of the anchor
    side: str
    padding: float = DEFAULT_PADDING

    @property
    def anchor(self) -> str:
        # Tk anchor naming: the callout's east edge touches a left-half plate.
        return "e" if self.side == LEFT else "w"

    def origin(self, width: float, height: float) -> tuple[float, float]:
        """Top-left corner of a ``width`` x ``height`` callout, opening away from the table."""
        top = self.y - height / 2
        if self.side == LEFT:
            return (self.x - self.padding - width, top)
        return (self.x + self.padding, top)


def place_callout(entry_id: str, rect: Rect, side: str, *, padding: float = DEFAULT_PADDING) -> CalloutPlacement:
    x = rect.left if side == LEFT else rect.right
    return CalloutPlacement(entry_id=entry_id, x=x, y=rect.center_y, side=side, padding=padding)


@dataclass
class HoverState:
    active_entry_id: str | None = None
    anchor_rect: Rect | None = None
    side: str | None = None

    @property
    def is_active(self) -> bool:
        return self.active_entry_id is not None


class TooltipPositioner:
    def __init__(
        self,
        *,
        measure: Callable[[str], Rect | None],
        overlay=None,
        on_hover: Callable[[str | None], None] | None = None,
        on_view_details: Callable[[str], None] | None = None,
        schedule: Callable[[Callable[[], None]], object] | None = None,
        padding: float = DEFAULT_PADDING,
    ) -> None:
        self._measure = measure
        self._overlay = overlay
        self._on_hover = on_hover
        self._on_view_details = on_view_details
        self._schedule = schedule or (lambda fn: fn())
        self.padding = float(padding)

        self.state = HoverState()
        self.placement: CalloutPlacement | None = None
        self._entries: dict[str, Entry] = {}
        self._angles: dict[str, float] = {}
        self._in_anchor = False
        self._in_callout = False
        # Bumped on every measurement request and every deactivation; a
        # measurement only lands if its generation is still current.
        self._generation = 0

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @property
    def active_entry(self) -> Entry | None:
        if self.state.active_entry_id is None:
            return None
        return self._entries.get(self.state.active_entry_id)

    def set_slots(self, entries: Sequence[Entry], slots: Sequence[LayoutSlot]) -> None:
        """Replace the entries on the table (called on every re-render)."""
        self._entries = {e.entry_id: e for e in entries}
        self._angles = {s.entry_id: s.angle for s in slots}

        active = self.state.active_entry_id
        if active is None:
            return
        if active not in self._angles:
            self._deactivate()
            return
        side = side_of(self._angles[active])
        if side != self.state.side:
            self.state.side = side
            self._request_measure()

    # Pointer events

    def pointer_enter_anchor(self, entry_id: str) -> None:
        if entry_id not in self._angles:
            return
        self._in_anchor = True
        if self.state.active_entry_id != entry_id:
            self._in_callout = False
            self._activate(entry_id)

    def pointer_leave_anchor(self, entry_id: str) -> None:
        if entry_id != self.state.active_entry_id:
            return
        self._in_anchor = False
        if not self._in_callout:
            self._deactivate()

    def pointer_enter_callout(self) -> None:
        # Only an open callout can be entered; it keeps the hover session alive.
        if self.placement is None or not self.state.is_active:
            return
        self._in_callout = True
        if self._on_hover is not None:
            self._on_hover(self.state.active_entry_id)

    def pointer_leave_callout(self) -> None:
        if not self.state.is_active:
            return
        self._in_callout = False
        if not self._in_anchor:
            self._deactivate()

    def invalidate(self) -> None:
        """Geometry moved under the pointer (resize, scroll, window move)."""
        if self.state.is_active:
            self._request_measure()

    def view_details(self) -> None:
        entry = self.active_entry
        if entry is None or self._on_view_details is None:
            return
        self._on_view_details(entry.person)

    # Transitions

    def _activate(self, entry_id: str) -> None:
        if self.placement is not None and self._overlay is not None:
            self._overlay.hide()
        self.state = HoverState(active_entry_id=entry_id, side=side_of(self._angles[entry_id]))
        self.placement = None
        logger.debug("hover start entry=%s side=%s", entry_id, self.state.side)
        if self._on_hover is not None:
            self._on_hover(entry_id)
        self._request_measure()

    def _deactivate(self) -> None:
        was_active = self.state.is_active
        self._generation += 1
        self._in_anchor = False
        self._in_callout = False
        self.state = HoverState()
        self.placement = None
        if self._overlay is not None:
            self._overlay.hide()
        if was_active:
            logger.debug("hover end")
            if self._on_hover is not None:
                self._on_hover(None)

    def _request_measure(self) -> None:
        self._generation += 1
        generation = self._generation
        entry_id = self.state.active_entry_id
        self._schedule(lambda: self._apply_measure(generation, entry_id))

    def _apply_measure(self, generation: int, entry_id: str | None) -> None:
        if generation != self._generation or entry_id != self.state.active_entry_id or entry_id is None:
            logger.debug("dropping stale measurement for entry=%s", entry_id)
            return

        rect = self._measure(entry_id)
        if rect is None:
            # Anchor not on screen: show nothing rather than guess a position.
            self.state.anchor_rect = None
            self.placement = None
            if self._overlay is not None:
                self._overlay.hide()
            return

        side = self.state.side or side_of(self._angles[entry_id])
        self.state.anchor_rect = rect
        self.placement = place_callout(entry_id, rect, side, padding=self.padding)
        if self._overlay is not None:
            self._overlay.show(self.placement, self._entries[entry_id])


class CanvasAnchor:
    """Measure a tagged group of canvas items in screen coordinates.

    Works with a ``tkinter.Canvas`` or anything with the same few methods.
    """

    def __init__(self, canvas, tag_for: Callable[[str], str]) -> None:
        self.canvas = canvas
        self.tag_for = tag_for

    def __call__(self, entry_id: str) -> Rect | None:
        canvas = self.canvas
        if not canvas.winfo_ismapped():
            return None
        bbox = canvas.bbox(self.tag_for(entry_id))
        if not bbox:
            return None
        x0, y0, x1, y1 = bbox
        # canvasx/canvasy account for a scrolled canvas.
        dx = canvas.winfo_rootx() - canvas.canvasx(0)
        dy = canvas.winfo_rooty() - canvas.canvasy(0)
        return Rect.from_bbox(x0 + dx, y0 + dy, x1 + dx, y1 + dy)
