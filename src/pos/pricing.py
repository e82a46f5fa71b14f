"""
Pure pricing helpers: cart lines in, subtotal / tax / total out.

Money is Decimal throughout and rounded half-up to cents. Tax is taken from
the exact subtotal, never from per-line rounded amounts.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple

from db.models import CartLine

TAX_RATE = Decimal("0.08")  # fixed, single jurisdiction
CENT = Decimal("0.01")


class Totals(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def subtotal(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.product.price * line.quantity for line in lines), Decimal("0"))


def tax(amount: Decimal) -> Decimal:
    return round_money(amount * TAX_RATE)


def total(sub: Decimal, tax_amount: Decimal) -> Decimal:
    return sub + tax_amount


def price_lines(lines: Iterable[CartLine]) -> Totals:
    """
    Price a set of lines for display or for a Transaction record.

    The returned values always satisfy total == subtotal + tax.
    """
    exact = subtotal(lines)
    tax_amount = tax(exact)
    sub = round_money(exact)
    return Totals(sub, tax_amount, total(sub, tax_amount))


def format_money(value: Decimal) -> str:
    return f"${round_money(value):,.2f}"
