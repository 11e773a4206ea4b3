from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence

from fenzi_table.config import TableConfig
from fenzi_table.geometry import place_setting
from fenzi_table.ledger import Entry
from fenzi_table.slots import assign_slots, side_of
from fenzi_table.variants import food_for


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


def _point(p: tuple[float, float]) -> dict:
    return {"dx": round(p[0], 3), "dy": round(p[1], 3)}


def build_layout_payload(
    entries: Sequence[Entry],
    config: TableConfig,
    *,
    angles: Mapping[str, float] | None = None,
) -> dict:
    by_id = {e.entry_id: e for e in entries}
    seats: list[dict] = []
    for slot in assign_slots(entries, angles):
        entry = by_id[slot.entry_id]
        setting = place_setting(slot.angle, config)
        food = food_for(entry.entry_id)
        seats.append(
            {
                "id": entry.entry_id,
                "person": entry.person,
                "type": entry.type,
                "angle": round(slot.angle, 6),
                "side": side_of(slot.angle),
                "variant": food.index,
                "dish": food.key,
                "dish_offset": _point(setting.dish.center),
                "plate_offset": _point(setting.plate.center),
                "content_angle": round(setting.plate.content_angle, 6),
            }
        )
    return {
        "schema_version": 1,
        "table": {
            "diameter": config.diameter,
            "dish_radius": config.dish_radius,
            "plate_radius": config.plate_radius,
        },
        "seats": seats,
    }


def write_layout(path: Path, payload: dict) -> Path:
    _atomic_write_text(path, json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
    return path
