from __future__ import annotations

from decimal import Decimal
import json
from pathlib import Path

import pytest

from fenzi_table.ledger import EXPENSE, INCOME, entry_from_json, ledger_from_json, load_ledger


def _raw(**overrides) -> dict:
    raw = {
        "id": "1706000000001",
        "person": "Uncle Zhang",
        "amount": 888,
        "date": "2024-02-10",
        "type": "expense",
        "occasion": "Spring Festival",
    }
    raw.update(overrides)
    return raw


def test_entry_from_json_reads_original_keys() -> None:
    entry = entry_from_json(_raw(aiAnalysis="Warm ties.", description="Family", amount=66.6, type="INCOME"))
    assert entry.entry_id == "1706000000001"
    assert entry.amount == Decimal("66.6")
    assert entry.type == INCOME
    assert entry.is_income
    assert entry.ai_analysis == "Warm ties."
    assert entry.description == "Family"


def test_empty_analysis_is_none() -> None:
    entry = entry_from_json(_raw(aiAnalysis=""))
    assert entry.ai_analysis is None
    assert entry.type == EXPENSE


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"person": "x", "amount": 1, "date": "d", "type": "income"}, "missing an id"),
        (_raw(type="gift"), "type must be one of"),
        (_raw(amount=-5), "non-negative"),
        (_raw(amount="lots"), "not a number"),
    ],
)
def test_entry_from_json_rejects_bad_input(raw: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        entry_from_json(raw)


def test_missing_field_names_the_entry() -> None:
    raw = _raw()
    del raw["date"]
    with pytest.raises(ValueError, match="1706000000001.*'date'"):
        entry_from_json(raw)


def test_ledger_accepts_list_or_object_and_collects_angles() -> None:
    items = [_raw(id="a", angle=90), _raw(id="b")]
    from_list = ledger_from_json(items)
    from_object = ledger_from_json({"entries": items})

    assert [e.entry_id for e in from_list.entries] == ["a", "b"]
    assert from_list.angles == {"a": 90.0}
    assert from_object == from_list


def test_ledger_rejects_non_list() -> None:
    with pytest.raises(ValueError, match="list of entries"):
        ledger_from_json({"rows": []})


def test_load_ledger(tmp_path: Path) -> None:
    path = tmp_path / "ledger.json"
    path.write_text(json.dumps([_raw()]), encoding="utf-8")
    ledger = load_ledger(path)
    assert len(ledger.entries) == 1
    assert ledger.entries[0].person == "Uncle Zhang"


def test_load_ledger_bad_json(tmp_path: Path) -> None:
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_ledger(path)


@pytest.mark.parametrize("angle", [float("nan"), float("inf"), float("-inf"), "NaN"])
def test_ledger_rejects_non_finite_angle(angle) -> None:
    with pytest.raises(ValueError, match="'a': angle must be a finite number"):
        ledger_from_json([_raw(id="a", angle=angle)])


def test_load_ledger_rejects_nan_angle(tmp_path: Path) -> None:
    path = tmp_path / "ledger.json"
    path.write_text('[{"id": "a", "person": "p", "amount": 1, "date": "d", "type": "income", "angle": NaN}]', encoding="utf-8")
    with pytest.raises(ValueError, match="finite"):
        load_ledger(path)
