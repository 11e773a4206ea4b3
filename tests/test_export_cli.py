from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from fenzi_table.cli import main
from fenzi_table.config import TableConfig
from fenzi_table.export import build_layout_payload
from fenzi_table.ledger import EXPENSE, INCOME, Entry


def _write_ledger(path: Path) -> Path:
    path.write_text(
        json.dumps(
            {
                "entries": [
                    {"id": "a1", "person": "Uncle Zhang", "amount": 888, "date": "2024-02-10", "type": "expense"},
                    {"id": "a2", "person": "Li Wei", "amount": 1888, "date": "2024-03-02", "type": "income"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return int(exc.value.code)


def test_layout_payload_two_seats() -> None:
    entries = [
        Entry(entry_id="a1", person="Uncle Zhang", amount=Decimal("888"), type=EXPENSE, date="2024-02-10"),
        Entry(entry_id="a2", person="Li Wei", amount=Decimal("1888"), type=INCOME, date="2024-03-02"),
    ]
    payload = build_layout_payload(entries, TableConfig())
    first, second = payload["seats"]

    assert (first["angle"], first["side"], first["variant"], first["dish"]) == (0.0, "right", 2, "greens")
    assert first["plate_offset"] == {"dx": 132.0, "dy": 0.0}
    assert first["content_angle"] == 90.0

    assert (second["angle"], second["side"]) == (180.0, "left")
    assert second["dish_offset"]["dx"] == pytest.approx(-48.0)
    assert second["content_angle"] == 270.0
    assert payload["table"]["plate_radius"] == 132.0


def test_cli_layout_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    ledger = _write_ledger(tmp_path / "ledger.json")
    rc = _run(["layout", str(ledger), "--config", str(tmp_path / "absent.toml")])
    assert rc == 0

    payload = json.loads(capsys.readouterr().out)
    assert [s["id"] for s in payload["seats"]] == ["a1", "a2"]
    assert [s["side"] for s in payload["seats"]] == ["right", "left"]


def test_cli_layout_writes_file(tmp_path: Path) -> None:
    ledger = _write_ledger(tmp_path / "ledger.json")
    out = tmp_path / "out" / "layout.json"
    rc = _run(["layout", str(ledger), "--config", str(tmp_path / "absent.toml"), "--out", str(out)])
    assert rc == 0
    assert json.loads(out.read_text(encoding="utf-8"))["schema_version"] == 1


def test_cli_layout_missing_or_invalid_ledger(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["layout", str(tmp_path / "nope.json")]) == 2
    assert "Missing ledger" in capsys.readouterr().err

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"id": "x", "person": "p", "amount": 1, "date": "d", "type": "loan"}]), encoding="utf-8")
    assert _run(["layout", str(bad), "--config", str(tmp_path / "absent.toml")]) == 2
    assert "Invalid input" in capsys.readouterr().err


def test_cli_init_and_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "config.toml"
    assert _run(["init", "--config", str(cfg)]) == 0
    assert cfg.exists()
    assert _run(["init", "--config", str(cfg)]) == 2
    assert _run(["init", "--config", str(cfg), "--force"]) == 0
    capsys.readouterr()

    assert _run(["status", "--config", str(cfg)]) == 0
    out = capsys.readouterr().out
    assert "plate_radius=132.0" in out
    assert "callout_padding=10.0" in out
