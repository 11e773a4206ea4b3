from __future__ import annotations

import logging
from typing import Callable, Sequence
import tkinter as tk
from tkinter import messagebox, ttk

from fenzi_table.callout import build_callout_content, format_amount
from fenzi_table.config import TableConfig
from fenzi_table.geometry import Point, RingPlacement, circle_points, place_setting, rect_points
from fenzi_table.ledger import Entry, Ledger
from fenzi_table.slots import LayoutSlot, assign_slots
from fenzi_table.tooltip import CalloutPlacement, CanvasAnchor, TooltipPositioner
from fenzi_table.variants import FoodVariant, food_for


logger = logging.getLogger(__name__)

BACKGROUND = "#cf1515"
TABLE_WOOD = "#5c1a0b"
TABLE_RIM = "#3b0f06"
LAZY_SUSAN = "#7a2410"
PLATE = "#f0f0f0"
PLATE_EDGE = "#d1d5db"
ENVELOPE = "#d11515"
ENVELOPE_EDGE = "#b91c1c"
GOLD = "#FFD700"
CALLOUT_BG = "#fdf6ec"

# Where each dish's garnish sits, in the dish's own upright frame: (x, y, radius).
_FOOD_SPOTS: dict[str, list[tuple[float, float, float]]] = {
    "dumplings": [(-8.0, -10.0, 12.0), (-12.0, 6.0, 12.0), (10.0, -2.0, 12.0)],
    "spicy_fish": [(-6.0, -10.0, 10.0), (6.0, 12.0, 7.0), (14.0, -12.0, 4.0)],
    "greens": [(-12.0, -6.0, 9.0), (2.0, 4.0, 12.0), (14.0, -8.0, 9.0)],
    "tofu": [(-8.0, -4.0, 12.0), (10.0, 10.0, 9.0), (8.0, -14.0, 4.0)],
}


def _shift(points: list[Point], dx: float, dy: float) -> list[Point]:
    return [(x + dx, y + dy) for x, y in points]


class CalloutWindow:
    """Detail panel for the hovered entry.

    Lives on its own borderless, topmost window so nothing on the table can
    clip or cover it.
    """

    def __init__(self, master: tk.Misc, config: TableConfig) -> None:
        self.master = master
        self.table_config = config
        self.on_enter: Callable[[], None] | None = None
        self.on_leave: Callable[[], None] | None = None
        self.on_action: Callable[[], None] | None = None
        self._tw: tk.Toplevel | None = None
        self._entry_id: str | None = None

    def show(self, placement: CalloutPlacement, entry: Entry) -> None:
        if self._tw is None or self._entry_id != entry.entry_id:
            self._build(entry)
        tw = self._tw
        tw.update_idletasks()
        width = int(self.table_config.callout_width)
        height = tw.winfo_reqheight()
        x, y = placement.origin(width, height)
        tw.wm_geometry(f"{width}x{height}+{int(round(x))}+{int(round(y))}")
        logger.debug("callout entry=%s side=%s at %d,%d", entry.entry_id, placement.side, x, y)

    def hide(self) -> None:
        if self._tw is None:
            return
        self._tw.destroy()
        self._tw = None
        self._entry_id = None

    def _build(self, entry: Entry) -> None:
        self.hide()
        content = build_callout_content(entry, currency_symbol=self.table_config.currency_symbol)
        wrap = int(self.table_config.callout_width) - 28

        tw = tk.Toplevel(self.master)
        self._tw = tw
        self._entry_id = entry.entry_id
        tw.wm_overrideredirect(True)
        tw.attributes("-topmost", True)

        frm = ttk.Frame(tw, padding=(12, 10), style="Fenzi.Callout.TFrame")
        frm.pack(fill="both", expand=True)

        head = ttk.Frame(frm, style="Fenzi.Callout.TFrame")
        head.pack(fill="x")
        ttk.Label(head, text=content.date.upper(), style="Fenzi.CalloutMuted.TLabel").pack(side="left")
        marker_style = "Fenzi.Income.TLabel" if entry.is_income else "Fenzi.Expense.TLabel"
        ttk.Label(head, text=content.direction_marker, style=marker_style).pack(side="right")

        row = ttk.Frame(frm, style="Fenzi.Callout.TFrame")
        row.pack(fill="x", pady=(2, 2))
        ttk.Label(row, text=content.person, style="Fenzi.CalloutTitle.TLabel", wraplength=wrap // 2).pack(side="left")
        ttk.Label(row, text=content.amount, style=marker_style).pack(side="right")

        if content.occasion:
            ttk.Label(frm, text=content.occasion, style="Fenzi.CalloutMuted.TLabel").pack(anchor="w")
        if content.analysis:
            ttk.Separator(frm).pack(fill="x", pady=6)
            ttk.Label(
                frm,
                text=content.analysis,
                style="Fenzi.CalloutQuote.TLabel",
                wraplength=wrap,
                justify="left",
            ).pack(anchor="w")

        ttk.Button(frm, text=content.action_label, command=self._action).pack(fill="x", pady=(10, 0))

        tw.bind("<Enter>", self._on_enter, add=True)
        tw.bind("<Leave>", self._on_leave, add=True)

    def _on_enter(self, _e=None) -> None:
        if self.on_enter is not None:
            self.on_enter()

    def _on_leave(self, e) -> None:
        tw = self._tw
        if tw is None:
            return
        # Children share the toplevel's bindings; moving between them is not leaving.
        under = tw.winfo_containing(e.x_root, e.y_root)
        if under is not None and under.winfo_toplevel() is tw:
            return
        if self.on_leave is not None:
            self.on_leave()

    def _action(self) -> None:
        if self.on_action is not None:
            self.on_action()


class TableCanvas(tk.Canvas):
    """The round table with one place setting per entry.

    Only the plate disc of each setting is interactive; everything drawn over
    it is disabled so the pointer never "leaves" a plate by crossing its
    envelope or rim.
    """

    def __init__(
        self,
        master: tk.Misc,
        config: TableConfig,
        *,
        on_anchor_enter: Callable[[str], None],
        on_anchor_leave: Callable[[str], None],
        on_geometry_change: Callable[[], None],
    ) -> None:
        size = int(config.diameter + config.plate_size * 2)
        super().__init__(master, background=BACKGROUND, highlightthickness=0, width=size, height=size)
        self.table_config = config
        self.on_anchor_enter = on_anchor_enter
        self.on_anchor_leave = on_anchor_leave
        self.on_geometry_change = on_geometry_change

        self._origin: Point = (size / 2, size / 2)
        self._index: dict[str, int] = {}
        self._angles: dict[str, float] = {}
        # entry_id -> [(item, local points)] for the items that grow on hover
        self._plate_items: dict[str, list[tuple[int, list[Point]]]] = {}
        self._hovered: str | None = None

        self.bind("<Configure>", self._on_configure, add=True)

    def plate_tag(self, entry_id: str) -> str:
        # Index-based tags: entry ids may contain characters Tk treats as tag operators.
        return f"plate-{self._index.get(entry_id, 'none')}"

    def _current_center(self) -> Point:
        w = self.winfo_width()
        h = self.winfo_height()
        if w <= 1 or h <= 1:
            w, h = int(self["width"]), int(self["height"])
        return (w / 2, h / 2)

    def _flatten(self, points: list[Point]) -> list[float]:
        ox, oy = self._origin
        flat: list[float] = []
        for x, y in points:
            flat.extend((ox + x, oy + y))
        return flat

    def _polygon(self, placement: RingPlacement, points: list[Point], **kw) -> int:
        return self.create_polygon(*self._flatten(placement.map_points(points)), **kw)

    def render(self, entries: Sequence[Entry], slots: Sequence[LayoutSlot]) -> None:
        self.delete("all")
        self._index = {e.entry_id: i for i, e in enumerate(entries)}
        self._angles = {s.entry_id: s.angle for s in slots}
        self._plate_items = {}
        self._hovered = None
        self._origin = self._current_center()

        cfg = self.table_config
        ox, oy = self._origin
        r = cfg.diameter / 2
        self.create_oval(ox - r, oy - r, ox + r, oy + r, fill=TABLE_WOOD, outline=TABLE_RIM, width=6, state="disabled")
        inner = cfg.dish_radius + cfg.dish_size / 2
        self.create_oval(
            ox - inner, oy - inner, ox + inner, oy + inner, fill=LAZY_SUSAN, outline=TABLE_RIM, width=2, state="disabled"
        )

        by_id = {e.entry_id: e for e in entries}
        for slot in slots:
            entry = by_id.get(slot.entry_id)
            if entry is not None:
                self._draw_seat(entry, slot)
        logger.debug("rendered %d seats", len(slots))

    def _draw_seat(self, entry: Entry, slot: LayoutSlot) -> None:
        cfg = self.table_config
        i = self._index[entry.entry_id]
        setting = place_setting(slot.angle, cfg)

        # Shared dish, closer to the center. Decorative only.
        self._polygon(
            setting.dish,
            circle_points(cfg.dish_size / 2),
            fill="#ffffff",
            outline="#e5e7eb",
            smooth=True,
            state="disabled",
        )
        self._draw_food(setting.dish, food_for(entry.entry_id))

        half = cfg.plate_size / 2
        shapes: list[tuple[list[Point], dict]] = [
            (circle_points(half), {"fill": PLATE, "outline": PLATE_EDGE, "smooth": True}),
            (circle_points(half * 2 / 3), {"fill": "", "outline": "#c7c7c7", "smooth": True, "state": "disabled"}),
            (rect_points(44, 64, tilt=-6), {"fill": ENVELOPE, "outline": ENVELOPE_EDGE, "state": "disabled"}),
            (_shift(circle_points(6, segments=12), 0, -22), {"fill": GOLD, "outline": "#fde68a", "smooth": True, "state": "disabled"}),
            (_shift(rect_points(4, cfg.plate_size, tilt=6), half + 8, 0), {"fill": "#dddddd", "outline": "", "state": "disabled"}),
            (_shift(rect_points(4, cfg.plate_size, tilt=6), half + 14, 4), {"fill": "#dddddd", "outline": "", "state": "disabled"}),
        ]
        plate_tag = f"plate-{i}"
        items: list[tuple[int, list[Point]]] = []
        for n, (points, kw) in enumerate(shapes):
            tags = (f"seat-{i}", plate_tag) if n == 0 else (f"seat-{i}",)
            item = self._polygon(setting.plate, points, tags=tags, **kw)
            items.append((item, points))
        self._plate_items[entry.entry_id] = items

        eid = entry.entry_id
        self.tag_bind(plate_tag, "<Enter>", lambda _e, eid=eid: self.on_anchor_enter(eid))
        self.tag_bind(plate_tag, "<Leave>", lambda _e, eid=eid: self.on_anchor_leave(eid))

    def _draw_food(self, dish: RingPlacement, food: FoodVariant) -> None:
        if food.base_color != "#ffffff":
            self._polygon(dish, circle_points(28), fill=food.base_color, outline="", smooth=True, state="disabled")
        for (x, y, radius), color in zip(_FOOD_SPOTS[food.key], food.accent_colors):
            self._polygon(
                dish,
                _shift(circle_points(radius / 2, segments=12), x, y),
                fill=color,
                outline="#e5e7eb" if food.key == "dumplings" else "",
                smooth=True,
                state="disabled",
            )

    def set_hovered(self, entry_id: str | None) -> None:
        if entry_id == self._hovered:
            return
        previous, self._hovered = self._hovered, entry_id
        if previous is not None:
            self._reshape_plate(previous, hovered=False)
        if entry_id is not None:
            self._reshape_plate(entry_id, hovered=True)

    def _reshape_plate(self, entry_id: str, *, hovered: bool) -> None:
        # Items are moved in place (never recreated) so Tk keeps the pointer on them.
        if entry_id not in self._plate_items:
            return
        plate = place_setting(self._angles[entry_id], self.table_config, hovered=hovered).plate
        for item, points in self._plate_items[entry_id]:
            self.coords(item, *self._flatten(plate.map_points(points)))
        if hovered:
            self.tag_raise(f"seat-{self._index[entry_id]}")

    def _on_configure(self, _e=None) -> None:
        new = self._current_center()
        dx, dy = new[0] - self._origin[0], new[1] - self._origin[1]
        if dx or dy:
            self.move("all", dx, dy)
            self._origin = new
        self.on_geometry_change()


class FenziTableUI(tk.Tk):
    def __init__(
        self,
        ledger: Ledger,
        config: TableConfig | None = None,
        *,
        on_view_details: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__()
        self.title("Fenzi Qian: Gift Table")
        self.geometry("1000x720")
        self.ledger = ledger
        self.table_config = config or TableConfig()
        self._external_view_details = on_view_details

        self._build()
        self.render()

    def _build(self) -> None:
        try:
            style = ttk.Style(self)
            if "clam" in style.theme_names():
                style.theme_use("clam")
            style.configure("Fenzi.Callout.TFrame", background=CALLOUT_BG)
            style.configure("Fenzi.CalloutMuted.TLabel", background=CALLOUT_BG, foreground="#374151", font=("TkDefaultFont", 8, "bold"))
            style.configure("Fenzi.CalloutTitle.TLabel", background=CALLOUT_BG, foreground="#111827", font=("Georgia", 12, "bold"))
            style.configure("Fenzi.CalloutQuote.TLabel", background=CALLOUT_BG, foreground="#111827", font=("Georgia", 9, "italic"))
            style.configure("Fenzi.Income.TLabel", background=CALLOUT_BG, foreground="#166534", font=("TkDefaultFont", 11, "bold"))
            style.configure("Fenzi.Expense.TLabel", background=CALLOUT_BG, foreground="#991b1b", font=("TkDefaultFont", 11, "bold"))
        except tk.TclError as e:
            logger.debug("style setup skipped: %s", e)

        body = ttk.Frame(self)
        body.pack(fill="both", expand=True)

        self.canvas = TableCanvas(
            body,
            self.table_config,
            on_anchor_enter=lambda eid: self.positioner.pointer_enter_anchor(eid),
            on_anchor_leave=lambda eid: self.positioner.pointer_leave_anchor(eid),
            on_geometry_change=lambda: self.positioner.invalidate(),
        )
        self.canvas.pack(side="left", fill="both", expand=True)

        side = ttk.Frame(body, padding=(10, 10))
        side.pack(side="left", fill="y")
        ttk.Label(side, text="Guests").pack(anchor="w")
        self.guest_list = tk.Listbox(side, width=28, activestyle="none", exportselection=False)
        self.guest_list.pack(fill="both", expand=True, pady=(4, 0))

        self.status_var = tk.StringVar(value="Hover a plate to see the envelope.")
        ttk.Label(self, textvariable=self.status_var, padding=(10, 4)).pack(fill="x")

        self.callout = CalloutWindow(self, self.table_config)
        self.positioner = TooltipPositioner(
            measure=CanvasAnchor(self.canvas, self.canvas.plate_tag),
            overlay=self.callout,
            on_hover=self._on_hover,
            on_view_details=self._on_view_details,
            schedule=self.after_idle,
            padding=self.table_config.callout_padding,
        )
        self.callout.on_enter = self.positioner.pointer_enter_callout
        self.callout.on_leave = self.positioner.pointer_leave_callout
        self.callout.on_action = self.positioner.view_details

        # Moving the window moves every plate on screen.
        self.bind("<Configure>", self._on_window_configure, add=True)

    def render(self) -> None:
        entries = self.ledger.entries
        slots = assign_slots(entries, self.ledger.angles)
        self.canvas.render(entries, slots)
        self.positioner.set_slots(entries, slots)

        self.guest_list.delete(0, "end")
        for e in entries:
            amount = format_amount(e.amount, self.table_config.currency_symbol)
            self.guest_list.insert("end", f"{e.person}  {amount}")

    def _on_window_configure(self, e) -> None:
        if e.widget is self:
            self.positioner.invalidate()

    def _on_hover(self, entry_id: str | None) -> None:
        self.canvas.set_hovered(entry_id)
        self.guest_list.selection_clear(0, "end")
        if entry_id is None:
            self.status_var.set("Hover a plate to see the envelope.")
            return
        for i, e in enumerate(self.ledger.entries):
            if e.entry_id == entry_id:
                self.guest_list.selection_set(i)
                self.guest_list.see(i)
                self.status_var.set(f"{e.person} · {e.occasion or e.date}")
                break

    def _on_view_details(self, person: str) -> None:
        if self._external_view_details is not None:
            self._external_view_details(person)
            return
        lines: list[str] = []
        for e in self.ledger.entries:
            if e.person != person:
                continue
            direction = "received" if e.is_income else "given"
            amount = format_amount(e.amount, self.table_config.currency_symbol)
            lines.append(f"{e.date}  {direction} {amount}  {e.occasion}".rstrip())
        messagebox.showinfo(person, "\n".join(lines) or "No records.", parent=self)


def launch(ledger: Ledger, config: TableConfig | None = None) -> None:
    # No display (headless session, missing $DISPLAY): exit with a message, not a trace.
    try:
        app = FenziTableUI(ledger, config)
    except tk.TclError as e:
        raise SystemExit(f"Failed to start UI: {e}") from e
    app.mainloop()
