from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodVariant:
    index: int
    key: str
    label: str
    base_color: str
    accent_colors: tuple[str, ...]


# Shared dishes placed between the table center and each guest's plate.
FOOD_VARIANTS: tuple[FoodVariant, ...] = (
    FoodVariant(0, "dumplings", "Dumplings / Buns", "#ffffff", ("#fdfbf7", "#fdfbf7", "#fdfbf7")),
    FoodVariant(1, "spicy_fish", "Spicy Fish", "#e85d04", ("#ffba08", "#9d0208", "#4ade80")),
    FoodVariant(2, "greens", "Greens", "#ffffff", ("#38b000", "#70e000", "#008000")),
    FoodVariant(3, "tofu", "Tofu / Scrambled Eggs", "#fff3b0", ("#ffea00", "#ffffff", "#22c55e")),
)


def char_code_sum(identity: str) -> int:
    """Sum of the UTF-16 code units of ``identity``.

    Characters outside the BMP count as their two surrogate units, so the same
    id sums to the same value it does in a browser.
    """
    data = identity.encode("utf-16-le", "surrogatepass")
    return sum(int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2))


def variant_index(identity: str, k: int = len(FOOD_VARIANTS)) -> int:
    if k <= 0:
        raise ValueError("k must be positive")
    return char_code_sum(identity) % k


def food_for(identity: str) -> FoodVariant:
    return FOOD_VARIANTS[variant_index(identity, len(FOOD_VARIANTS))]
