"""Order totals and order numbers.

Totals are always derived from stored product prices: subtotal is the sum of
line totals, tax is ``tax_rate`` of the subtotal, and a flat delivery fee is
added per order. Every amount is rounded half-up to two decimals.
"""

import secrets
import string
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")
_BASE36 = string.digits + string.ascii_uppercase

ORDER_NUMBER_PREFIX = "ORD"


def to_money(value) -> float:
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    delivery_fee: float
    tax: float
    total: float


def line_total(unit_price: float, quantity: int) -> float:
    return to_money(Decimal(str(unit_price)) * quantity)


def compute_totals(line_totals, delivery_fee: float, tax_rate: float) -> OrderTotals:
    subtotal = sum((Decimal(str(amount)) for amount in line_totals), Decimal("0"))
    tax = subtotal * Decimal(str(tax_rate))
    fee = Decimal(str(delivery_fee))
    return OrderTotals(
        subtotal=to_money(subtotal),
        delivery_fee=to_money(fee),
        tax=to_money(tax),
        total=to_money(subtotal + fee + tax),
    )


def generate_order_number(now_ms: int | None = None) -> str:
    """``ORD`` + millisecond timestamp + five random base-36 characters."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{ORDER_NUMBER_PREFIX}{now_ms}{suffix}"
