"""Amount normalisation and due status derivation shared by the ledger services."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fee_ledger.core.config import settings
from fee_ledger.core.enums import DueStatus

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Largest value a Numeric(10, 2) column holds.
MAX_AMOUNT = Decimal("99999999.99")


def to_decimal(val) -> Decimal:
    if val is None:
        return ZERO
    return val if isinstance(val, Decimal) else Decimal(str(val))


def round_amount(val) -> Decimal:
    """Round to cents; allocation amounts and payment totals share this rounding."""
    return to_decimal(val).quantize(CENT, rounding=ROUND_HALF_UP)


def due_status(amount, paid_amount, epsilon: Optional[Decimal] = None) -> DueStatus:
    eps = settings.amount_epsilon if epsilon is None else epsilon
    amount = to_decimal(amount)
    paid = to_decimal(paid_amount)
    if paid >= amount - eps:
        return DueStatus.paid
    if paid > 0:
        return DueStatus.partial
    return DueStatus.due


def outstanding(amount, paid_amount) -> Decimal:
    return max(ZERO, to_decimal(amount) - to_decimal(paid_amount))
