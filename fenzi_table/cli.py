from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from fenzi_table.config import TableConfig, default_config_path, load_config, load_config_or_default, write_default_config
from fenzi_table.export import build_layout_payload, write_layout
from fenzi_table.ledger import Ledger, load_ledger


def _print_err(msg: str) -> None:
    print(msg, file=sys.stderr)


def _config_path(args: argparse.Namespace) -> Path:
    return Path(args.config).expanduser() if args.config else default_config_path()


def _load_inputs(args: argparse.Namespace) -> tuple[Ledger, TableConfig] | None:
    """Ledger + config for the commands that draw a table; None after reporting an error."""
    ledger_path = Path(args.ledger).expanduser()
    if not ledger_path.exists():
        _print_err(f"Missing ledger: {ledger_path}")
        return None
    config_path = _config_path(args)
    try:
        cfg = load_config_or_default(config_path)
        ledger = load_ledger(ledger_path)
    except ValueError as e:
        _print_err(f"Invalid input: {e}")
        return None
    return ledger, cfg


def cmd_init(args: argparse.Namespace) -> int:
    config_path = _config_path(args)
    if config_path.exists() and not args.force:
        _print_err(f"Config already exists: {config_path} (use --force to overwrite)")
        return 2
    write_default_config(config_path)
    print(f"Wrote config: {config_path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    config_path = _config_path(args)
    if config_path.exists():
        try:
            cfg = load_config(config_path)
        except ValueError as e:
            _print_err(f"Invalid config: {e}")
            return 2
        print(f"Config: {config_path}")
    else:
        cfg = TableConfig()
        print(f"No config found at: {config_path} (using defaults)")
    print(f"diameter={cfg.diameter}")
    print(f"dish_radius={cfg.dish_radius}")
    print(f"plate_radius={cfg.plate_radius}")
    print(f"hover_scale={cfg.hover_scale}")
    print(f"callout_width={cfg.callout_width}")
    print(f"callout_padding={cfg.callout_padding}")
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    loaded = _load_inputs(args)
    if loaded is None:
        return 2
    ledger, cfg = loaded
    payload = build_layout_payload(ledger.entries, cfg, angles=ledger.angles)
    if args.out:
        out = write_layout(Path(args.out).expanduser(), payload)
        print(f"Wrote layout: {out}")
    else:
        print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    loaded = _load_inputs(args)
    if loaded is None:
        return 2
    ledger, cfg = loaded
    # Tk is only needed here; the other commands work without a display.
    from fenzi_table.ui import launch as launch_ui

    launch_ui(ledger, cfg)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fenzi-table", add_help=True)
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create a config file with the default table scale")
    p_init.add_argument("--config", help="Config path (default: ~/.fenzi/config.toml)")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing config")
    p_init.set_defaults(func=cmd_init)

    p_status = sub.add_parser("status", help="Show the effective config")
    p_status.add_argument("--config", help="Config path (default: ~/.fenzi/config.toml)")
    p_status.set_defaults(func=cmd_status)

    p_layout = sub.add_parser("layout", help="Print the seat layout of a ledger as JSON")
    p_layout.add_argument("ledger", help="Ledger JSON file")
    p_layout.add_argument("--config", help="Config path (default: ~/.fenzi/config.toml)")
    p_layout.add_argument("--out", help="Write the layout to this file instead of stdout")
    p_layout.set_defaults(func=cmd_layout)

    p_show = sub.add_parser("show", help="Open the table window for a ledger")
    p_show.add_argument("ledger", help="Ledger JSON file")
    p_show.add_argument("--config", help="Config path (default: ~/.fenzi/config.toml)")
    p_show.set_defaults(func=cmd_show)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    rc = int(args.func(args))
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
