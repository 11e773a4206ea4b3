from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import tomllib


def default_state_dir() -> Path:
    return Path.home() / ".fenzi"


def default_config_path() -> Path:
    return default_state_dir() / "config.toml"


# A 480px table: the shared dish ring sits 48px out, the place settings 132px out.
DEFAULT_TABLE_DIAMETER = 480.0
DEFAULT_DISH_RADIUS = 48.0
DEFAULT_PLATE_RADIUS = 132.0


@dataclass(frozen=True)
class TableConfig:
    diameter: float = DEFAULT_TABLE_DIAMETER
    dish_radius: float = DEFAULT_DISH_RADIUS
    plate_radius: float = DEFAULT_PLATE_RADIUS
    dish_size: float = 80.0
    plate_size: float = 96.0
    hover_scale: float = 1.1
    callout_width: float = 200.0
    callout_padding: float = 10.0  # gap between plate edge and callout
    currency_symbol: str = "¥"

    def validate(self) -> None:
        for name in ("diameter", "dish_radius", "plate_radius", "dish_size", "plate_size", "callout_width"):
            if float(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive")
        if not (self.dish_radius < self.plate_radius < self.diameter / 2):
            raise ValueError("radii must satisfy dish_radius < plate_radius < diameter / 2")
        if self.hover_scale < 1:
            raise ValueError("hover_scale must be at least 1")
        if self.callout_padding < 0:
            raise ValueError("callout_padding must not be negative")

    def to_toml(self) -> str:
        lines: list[str] = []
        lines.append("# Fenzi Table config")
        lines.append("")
        lines.append("[table]")
        lines.append(f"diameter = {float(self.diameter)}")
        lines.append(f"dish_radius = {float(self.dish_radius)}")
        lines.append(f"plate_radius = {float(self.plate_radius)}")
        lines.append(f"dish_size = {float(self.dish_size)}")
        lines.append(f"plate_size = {float(self.plate_size)}")
        lines.append(f"hover_scale = {float(self.hover_scale)}")
        lines.append("")
        lines.append("[callout]")
        lines.append(f"width = {float(self.callout_width)}")
        lines.append(f"padding = {float(self.callout_padding)}")
        lines.append(f'currency_symbol = "{self.currency_symbol}"')
        lines.append("")
        return "\n".join(lines)


def config_from_toml(text: str) -> TableConfig:
    raw = tomllib.loads(text)
    table = raw.get("table", {})
    callout = raw.get("callout", {})
    defaults = TableConfig()

    cfg = TableConfig(
        diameter=float(table.get("diameter", defaults.diameter)),
        dish_radius=float(table.get("dish_radius", defaults.dish_radius)),
        plate_radius=float(table.get("plate_radius", defaults.plate_radius)),
        dish_size=float(table.get("dish_size", defaults.dish_size)),
        plate_size=float(table.get("plate_size", defaults.plate_size)),
        hover_scale=float(table.get("hover_scale", defaults.hover_scale)),
        callout_width=float(callout.get("width", defaults.callout_width)),
        callout_padding=float(callout.get("padding", defaults.callout_padding)),
        currency_symbol=str(callout.get("currency_symbol", defaults.currency_symbol)),
    )
    cfg.validate()
    return cfg


def load_config(path: Path) -> TableConfig:
    return config_from_toml(path.read_bytes().decode("utf-8"))


def load_config_or_default(path: Path | None) -> TableConfig:
    """Read ``path`` (or the default location) when it exists, else use the defaults."""
    path = path or default_config_path()
    if not path.exists():
        return TableConfig()
    return load_config(path)


def write_default_config(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(TableConfig().to_toml(), encoding="utf-8")
