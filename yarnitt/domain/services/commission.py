"""
Platform commission split.

Pure functions: no I/O, deterministic, safe to call anywhere.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from ..constants import PLATFORM_COMMISSION_RATE
from ..exceptions import ValidationError
from ..value_objects import Money

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CommissionSplit:
    """
    Platform cut and seller share of an order total.

    Balance Equation (MUST ALWAYS HOLD):
        commission + seller_earnings = total_amount
    """
    commission: Decimal
    seller_earnings: Decimal


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_commission(
    total_amount: Union[Money, Decimal, int, str],
    rate: Decimal = PLATFORM_COMMISSION_RATE,
) -> CommissionSplit:
    """
    Split an order total into platform commission and seller earnings.

    Args:
        total_amount: Order total (Money or plain number)
        rate: Commission rate, e.g. Decimal("0.10")

    Returns:
        CommissionSplit rounded half-up to cents

    Raises:
        ValidationError: If total_amount is negative
    """
    if isinstance(total_amount, Money):
        total = total_amount.amount
    else:
        total = Decimal(str(total_amount))

    if total < 0:
        raise ValidationError(
            f"Order total cannot be negative: {total}", field="total_amount"
        )

    commission = _round(total * Decimal(str(rate)))
    seller_earnings = _round(total - commission)
    return CommissionSplit(commission=commission, seller_earnings=seller_earnings)


class CommissionCalculator:
    """Commission split bound to a configured rate."""

    def __init__(self, rate: Decimal = PLATFORM_COMMISSION_RATE) -> None:
        rate = Decimal(str(rate))
        if not Decimal("0") <= rate <= Decimal("1"):
            raise ValueError(f"Commission rate must be between 0 and 1, got: {rate}")
        self.rate = rate

    def split(self, total: Money) -> tuple:
        """Return (commission, seller_earnings) as Money in the total's currency."""
        result = calculate_commission(total, self.rate)
        return (
            Money(amount=result.commission, currency=total.currency),
            Money(amount=result.seller_earnings, currency=total.currency),
        )
