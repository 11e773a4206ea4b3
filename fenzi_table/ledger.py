from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
import json
import math
from pathlib import Path


INCOME = "income"  # received (inbound)
EXPENSE = "expense"  # given (outbound)
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass(frozen=True)
class Entry:
    entry_id: str
    person: str
    amount: Decimal
    type: str
    date: str
    occasion: str = ""
    ai_analysis: str | None = None
    description: str | None = None

    @property
    def is_income(self) -> bool:
        return self.type == INCOME


@dataclass(frozen=True)
class Ledger:
    entries: list[Entry]
    # Seats the caller already manages: entry_id -> degrees.
    angles: dict[str, float] = field(default_factory=dict)


def _parse_amount(raw, entry_id: str) -> Decimal:
    try:
        amount = Decimal(str(raw))
    except InvalidOperation:
        raise ValueError(f"entry {entry_id!r}: amount is not a number: {raw!r}") from None
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"entry {entry_id!r}: amount must be a non-negative number")
    return amount


def entry_from_json(raw: dict) -> Entry:
    if not isinstance(raw, dict):
        raise ValueError(f"entry must be an object, got {type(raw).__name__}")
    entry_id = raw.get("id")
    if entry_id is None or str(entry_id) == "":
        raise ValueError("entry is missing an id")
    entry_id = str(entry_id)
    for key in ("person", "amount", "date", "type"):
        if key not in raw:
            raise ValueError(f"entry {entry_id!r}: missing {key!r}")
    kind = str(raw["type"]).lower()
    if kind not in TRANSACTION_TYPES:
        raise ValueError(f"entry {entry_id!r}: type must be one of: {', '.join(TRANSACTION_TYPES)}")

    analysis = raw.get("aiAnalysis")
    description = raw.get("description")
    return Entry(
        entry_id=entry_id,
        person=str(raw["person"]),
        amount=_parse_amount(raw["amount"], entry_id),
        type=kind,
        date=str(raw["date"]),
        occasion=str(raw.get("occasion", "")),
        ai_analysis=str(analysis) if analysis else None,
        description=str(description) if description else None,
    )


def ledger_from_json(raw) -> Ledger:
    items = raw.get("entries") if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        raise ValueError("ledger must be a list of entries or an object with an 'entries' list")

    entries: list[Entry] = []
    angles: dict[str, float] = {}
    for item in items:
        entry = entry_from_json(item)
        entries.append(entry)
        if item.get("angle") is not None:
            try:
                angle = float(item["angle"])
            except (TypeError, ValueError):
                raise ValueError(f"entry {entry.entry_id!r}: angle is not a number") from None
            # json.loads accepts NaN and Infinity
            if not math.isfinite(angle):
                raise ValueError(f"entry {entry.entry_id!r}: angle must be a finite number")
            angles[entry.entry_id] = angle
    return Ledger(entries=entries, angles=angles)


def load_ledger(path: Path) -> Ledger:
    """Read a ledger JSON file. The file is never written back."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"ledger is not valid JSON: {e}") from e
    return ledger_from_json(raw)
