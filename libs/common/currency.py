"""Money helpers for GainVault wallet balances.

Storage unit: USD as ``Decimal`` with two decimal places (``Numeric(12, 2)``).
API unit: JSON numbers (floats), e.g. ``42.5`` = $42.50.

Every amount that enters the ledger goes through :func:`to_money` so that
arithmetic never happens on floats.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# ─── constants ───────────────────────────────────────────────────────────────

CURRENCY: str = "USD"
CENT: Decimal = Decimal("0.01")
ZERO: Decimal = Decimal("0.00")


# ─── conversion helpers ───────────────────────────────────────────────────────


def to_money(value) -> Decimal:
    """Convert a number/str/Decimal to a 2dp Decimal (round half-up).

    ``None`` is treated as zero. Raises ``InvalidOperation`` for garbage input,
    including NaN and infinities.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise InvalidOperation(f"non-finite amount: {value}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_exact_money(value) -> Decimal | None:
    """Parse a client-supplied amount without rounding.

    Returns None for garbage, non-finite values and anything finer than a cent,
    so ``10.004`` is rejected rather than debited as ``10.00``.
    """
    if value is None:
        return None
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            return None
        cents = amount.quantize(CENT)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return cents if cents == amount else None


def percent_of(amount, percent: int | Decimal) -> Decimal:
    """Return ``percent`` % of ``amount`` as money. 50 % of $100 = $50.00."""
    return to_money(to_money(amount) * Decimal(percent) / Decimal(100))


def money_to_float(value) -> float:
    """Convert stored money to a JSON-friendly float."""
    return float(to_money(value))
