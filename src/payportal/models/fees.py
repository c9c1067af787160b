# src/payportal/models/fees.py
import decimal
from dataclasses import dataclass
from decimal import Decimal

_ROUNDING_MODES = {
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_DOWN,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
}


@dataclass(frozen=True)
class FeeSchedule:
    """
    Fee terms for one transaction type (payment or payout).

    Percent values are expressed out of 100, so ``percent_fee=Decimal("2.5")``
    means 2.5% of the principal.
    """
    fixed_fee: Decimal = Decimal("0")
    percent_fee: Decimal = Decimal("0")
    gst_percent_on_fee: Decimal = Decimal("0")
    minimum_principal: Decimal = Decimal("1")
    rounding: str = decimal.ROUND_HALF_UP

    def __post_init__(self):
        for name in ("fixed_fee", "percent_fee", "gst_percent_on_fee", "minimum_principal"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (Decimal, int, str)):
                raise ValueError(f"{name} must be a Decimal, int or numeric string")
            value = Decimal(value)
            if not value.is_finite():
                raise ValueError(f"{name} must be finite")
            object.__setattr__(self, name, value)

        if self.fixed_fee < 0:
            raise ValueError("fixed_fee must be >= 0")
        if not (0 <= self.percent_fee <= 100):
            raise ValueError("percent_fee must be between 0 and 100")
        if self.gst_percent_on_fee < 0:
            raise ValueError("gst_percent_on_fee must be >= 0")
        if self.minimum_principal <= 0:
            raise ValueError("minimum_principal must be > 0")
        if self.rounding not in _ROUNDING_MODES:
            raise ValueError(f"Unsupported rounding mode: {self.rounding}")


@dataclass(frozen=True)
class MonetaryBreakdown:
    principal: Decimal
    fee: Decimal
    gst: Decimal
    total_debit: Decimal
    net_credit: Decimal

    def to_dict(self) -> dict:
        return {
            "principal": str(self.principal),
            "fee": str(self.fee),
            "gst": str(self.gst),
            "total_debit": str(self.total_debit),
            "net_credit": str(self.net_credit),
        }
