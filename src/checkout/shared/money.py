"""Integer-cents arithmetic for prices, discounts and totals.

Every amount in the checkout domain is an ``int`` in minor currency units.
Floats never touch currency: a percentage is applied with integer
multiplication and a division that truncates toward zero, which gives the
same result on every client that prices the same cart.
"""

import os

DEFAULT_CURRENCY_SYMBOL = "₹"


def currency_symbol() -> str:
    """Symbol used when rendering cents for display."""
    return os.getenv("CHECKOUT_CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL)


def line_total(unit_price_cents: int, quantity: int) -> int:
    return unit_price_cents * quantity


def percentage_of(amount_cents: int, percent: int) -> int:
    """Return ``amount_cents * percent / 100`` truncated toward zero.

    Python's ``//`` floors, so the sign is handled separately to keep the
    truncation identical for negative inputs.
    """
    product = amount_cents * percent
    quotient = abs(product) // 100
    return quotient if product >= 0 else -quotient


def clamp(value: int, lower: int, upper: int) -> int:
    """Clamp ``value`` into ``[lower, upper]``; ``lower`` wins if the bounds cross."""
    return max(lower, min(value, upper))


def format_cents(amount_cents: int, symbol: str | None = None) -> str:
    """Render cents as a display string, e.g. ``1250`` -> ``"₹12.50"``."""
    symbol = currency_symbol() if symbol is None else symbol
    sign = "-" if amount_cents < 0 else ""
    major, minor = divmod(abs(amount_cents), 100)
    return f"{sign}{symbol}{major}.{minor:02d}"
