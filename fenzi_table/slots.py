from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from fenzi_table.ledger import Entry


LEFT = "left"
RIGHT = "right"


@dataclass(frozen=True)
class LayoutSlot:
    entry_id: str
    angle: float  # degrees, [0, 360)


def normalize_angle(angle: float) -> float:
    return float(angle) % 360.0


def assign_slots(
    entries: Sequence[Entry],
    angles: Mapping[str, float] | None = None,
) -> list[LayoutSlot]:
    """Give every entry a seat around the table, in entry order.

    Seats are spread evenly with the first entry at 0 degrees. An angle the
    caller already manages (``angles[entry_id]``) wins over the even spacing.
    Two entries sharing an identity or an override angle is a caller error and
    is left as-is.
    """
    n = len(entries)
    if n == 0:
        return []
    step = 360.0 / n
    overrides = angles or {}

    slots: list[LayoutSlot] = []
    for i, entry in enumerate(entries):
        if entry.entry_id in overrides:
            angle = normalize_angle(overrides[entry.entry_id])
        else:
            angle = i * step
        slots.append(LayoutSlot(entry_id=entry.entry_id, angle=angle))
    return slots


def is_left_half(angle: float) -> bool:
    # Inclusive at both 90 and 270 so seats on the vertical centerline never flip.
    a = normalize_angle(angle)
    return 90.0 <= a <= 270.0


def side_of(angle: float) -> str:
    return LEFT if is_left_half(angle) else RIGHT
