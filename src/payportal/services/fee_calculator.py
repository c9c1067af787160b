"""
Fee calculator for payments and payouts.

Every value is a ``Decimal`` with two fractional digits. Each fee line is
rounded on its own before anything is added up:

    percent part = round2(principal * percent_fee / 100)
    fee          = round2(fixed_fee + percent part)
    gst          = round2(fee * gst_percent_on_fee / 100)

Payments debit ``principal + fee + gst``. Payouts debit ``principal + fee``
from the wallet and credit exactly ``principal`` to the bank; no GST line is
charged on payout fees.

The calculator holds no state, so repeating a computation with the same
inputs returns an equal breakdown.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Union

from payportal.core.errors import BelowMinimum, InsufficientBalance, InvalidAmount
from payportal.models.fees import FeeSchedule, MonetaryBreakdown

Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_amount(value: Any) -> Decimal:
    """
    Parse a user- or backend-supplied amount into a two-digit Decimal.

    Floats go through ``str`` so that ``333.33`` stays ``333.33`` rather
    than its binary expansion. Amounts with sub-cent precision are refused
    instead of being rounded: the user must see exactly what is charged.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount("Please enter a valid amount")
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount("Please enter a valid amount")

    if not amount.is_finite():
        raise InvalidAmount("Amount must be a finite number")
    if amount < 0:
        raise InvalidAmount("Amount cannot be negative")
    try:
        cents = amount.quantize(CENT, rounding=ROUND_DOWN)
    except InvalidOperation:
        raise InvalidAmount("Amount is too large")
    if amount != cents:
        raise InvalidAmount("Amount cannot have more than 2 decimal places")
    return cents


class FeeCalculator:
    def round2(self, value: Decimal, schedule: FeeSchedule) -> Decimal:
        try:
            return value.quantize(CENT, rounding=schedule.rounding)
        except InvalidOperation:
            raise InvalidAmount("Amount is too large")

    def _validated(self, principal: Amount, schedule: FeeSchedule) -> Decimal:
        amount = to_amount(principal)
        if amount < schedule.minimum_principal:
            raise BelowMinimum(amount, schedule.minimum_principal)
        return amount

    def fee_for(self, principal: Decimal, schedule: FeeSchedule) -> Decimal:
        percent_part = self.round2(principal * schedule.percent_fee / HUNDRED, schedule)
        return self.round2(schedule.fixed_fee + percent_part, schedule)

    def compute_payment(self, principal: Amount, schedule: FeeSchedule) -> MonetaryBreakdown:
        amount = self._validated(principal, schedule)
        fee = self.fee_for(amount, schedule)
        gst = self.round2(fee * schedule.gst_percent_on_fee / HUNDRED, schedule)
        return MonetaryBreakdown(
            principal=amount,
            fee=fee,
            gst=gst,
            total_debit=self.round2(amount + fee + gst, schedule),
            net_credit=amount,
        )

    def compute_payout(self, principal: Amount, schedule: FeeSchedule) -> MonetaryBreakdown:
        amount = self._validated(principal, schedule)
        fee = self.fee_for(amount, schedule)
        return MonetaryBreakdown(
            principal=amount,
            fee=fee,
            gst=Decimal("0.00"),
            total_debit=self.round2(amount + fee, schedule),
            net_credit=amount,
        )

    def check_balance(self, breakdown: MonetaryBreakdown, available_balance: Amount) -> None:
        if isinstance(available_balance, float):
            available_balance = str(available_balance)
        available = Decimal(available_balance)
        if breakdown.total_debit > available:
            raise InsufficientBalance(breakdown.total_debit, available)


def compute_payment(principal: Amount, schedule: FeeSchedule) -> MonetaryBreakdown:
    return FeeCalculator().compute_payment(principal, schedule)


def compute_payout(principal: Amount, schedule: FeeSchedule) -> MonetaryBreakdown:
    return FeeCalculator().compute_payout(principal, schedule)
