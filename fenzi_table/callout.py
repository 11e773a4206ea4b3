from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from fenzi_table.ledger import Entry


INCOME_MARKER = "↓"
EXPENSE_MARKER = "↑"
ACTION_LABEL = "Read More →"


def format_amount(amount: Decimal, currency_symbol: str = "¥") -> str:
    # Thousands separators, at most three decimals, no trailing zeros: ¥1,888 / ¥66.6
    with localcontext() as ctx:
        # quantize needs every integer digit plus three decimals inside the precision
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        q = amount.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
        if q == q.to_integral_value():
            return f"{currency_symbol}{int(q):,}"
        text = f"{q:,.3f}".rstrip("0").rstrip(".")
    return f"{currency_symbol}{text}"


@dataclass(frozen=True)
class CalloutContent:
    date: str
    direction_marker: str
    person: str
    amount: str
    occasion: str
    analysis: str | None
    action_label: str = ACTION_LABEL


def build_callout_content(entry: Entry, *, currency_symbol: str = "¥") -> CalloutContent:
    return CalloutContent(
        date=entry.date,
        direction_marker=INCOME_MARKER if entry.is_income else EXPENSE_MARKER,
        person=entry.person,
        amount=format_amount(entry.amount, currency_symbol),
        occasion=entry.occasion,
        analysis=f"“{entry.ai_analysis}”" if entry.ai_analysis else None,
    )
