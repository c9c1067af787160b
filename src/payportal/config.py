import os
from decimal import Decimal
from typing import Optional

from payportal.models.fees import FeeSchedule


class Config:
    BACKEND_URL = os.getenv("PAYPORTAL_BACKEND_URL", "http://localhost:5000/api")
    HTTP_TIMEOUT = float(os.getenv("PAYPORTAL_HTTP_TIMEOUT", "15"))  # seconds per backend call
    GATEWAY_ENV = os.getenv("PAYPORTAL_GATEWAY_ENV", "sandbox")
    CURRENCY = os.getenv("PAYPORTAL_CURRENCY", "INR")
    DEBUG = os.getenv("PAYPORTAL_DEBUG", "0") == "1"

    # Payments: the customer pays principal + fee + GST on the fee
    PAYMENT_FIXED_FEE = os.getenv("PAYPORTAL_PAYMENT_FIXED_FEE", "0")
    PAYMENT_PERCENT_FEE = os.getenv("PAYPORTAL_PAYMENT_PERCENT_FEE", "0")
    PAYMENT_GST_PERCENT = os.getenv("PAYPORTAL_PAYMENT_GST_PERCENT", "0")
    PAYMENT_MINIMUM = os.getenv("PAYPORTAL_PAYMENT_MINIMUM", "100")

    # Payouts: a flat processing fee is added to the wallet debit
    PAYOUT_FIXED_FEE = os.getenv("PAYPORTAL_PAYOUT_FIXED_FEE", "20")
    PAYOUT_PERCENT_FEE = os.getenv("PAYPORTAL_PAYOUT_PERCENT_FEE", "0")
    PAYOUT_MINIMUM = os.getenv("PAYPORTAL_PAYOUT_MINIMUM", "100")

    ROUNDING = os.getenv("PAYPORTAL_ROUNDING", "ROUND_HALF_UP")


def payment_fee_schedule(config=Config) -> FeeSchedule:
    return FeeSchedule(
        fixed_fee=Decimal(config.PAYMENT_FIXED_FEE),
        percent_fee=Decimal(config.PAYMENT_PERCENT_FEE),
        gst_percent_on_fee=Decimal(config.PAYMENT_GST_PERCENT),
        minimum_principal=Decimal(config.PAYMENT_MINIMUM),
        rounding=config.ROUNDING,
    )


def payout_fee_schedule(config=Config) -> FeeSchedule:
    return FeeSchedule(
        fixed_fee=Decimal(config.PAYOUT_FIXED_FEE),
        percent_fee=Decimal(config.PAYOUT_PERCENT_FEE),
        gst_percent_on_fee=Decimal("0"),
        minimum_principal=Decimal(config.PAYOUT_MINIMUM),
        rounding=config.ROUNDING,
    )


def gateway_mode(env: Optional[str] = None) -> str:
    if env is None:
        env = Config.GATEWAY_ENV
    env = (env or "").lower()
    return "production" if env in ("prod", "production") else "sandbox"
