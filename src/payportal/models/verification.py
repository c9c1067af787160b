# src/payportal/models/verification.py
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class KycStatus(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FAILED = "failed"


class BankStatus(str, Enum):
    NOT_VERIFIED = "not_verified"
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class GatedAction(str, Enum):
    PAY = "pay"
    PAYOUT = "payout"
    ONBOARD_RETAILER = "onboard_retailer"


@dataclass(frozen=True)
class VerificationState:
    """
    Snapshot of the account's verification standing as of one backend read.

    ``can_transact`` is derived, never stored independently: it is true only
    when the bank account is verified. A failed read never carries a
    verified bank status (see ``failed_fetch``).
    """
    kyc_status: KycStatus
    bank_status: BankStatus
    last_refreshed_at: datetime
    available_balance: Decimal = Decimal("0")
    error: Optional[str] = None
    kyc: Optional[Dict[str, Any]] = field(default=None, compare=False)
    bank: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @property
    def can_transact(self) -> bool:
        return self.bank_status == BankStatus.VERIFIED

    @classmethod
    def failed_fetch(cls, message: str, at: datetime) -> "VerificationState":
        return cls(
            kyc_status=KycStatus.PENDING,
            bank_status=BankStatus.PENDING,
            last_refreshed_at=at,
            error=message,
        )

    def to_dict(self) -> dict:
        return {
            "kyc_status": self.kyc_status.value,
            "bank_status": self.bank_status.value,
            "can_transact": self.can_transact,
            "available_balance": str(self.available_balance),
            "last_refreshed_at": self.last_refreshed_at.isoformat(),
            "error": self.error,
        }


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    action: GatedAction
    reason: Optional[str] = None
    state: Optional[VerificationState] = None
