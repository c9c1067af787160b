from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from payportal.models.fees import MonetaryBreakdown
from payportal.models.status import InternalStatus, Outcome

_NON_LIVE_SESSION_IDS = ("undefined", "null")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TransactionKind(str, Enum):
    PAYMENT = "payment"
    PAYOUT = "payout"


class TransactionPhase(str, Enum):
    IDLE = "idle"
    AUTHORIZING = "authorizing"
    COMPUTING = "computing"
    SUBMITTING = "submitting"
    AWAITING_PROVIDER = "awaiting_provider"
    VERIFYING = "verifying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class PaymentOrder:
    amount_requested: Any
    customer_mobile: Optional[str] = None
    remarks: Optional[str] = None
    currency: str = "INR"
    customer: Dict[str, str] = field(default_factory=dict)
    submitted_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class PayoutRequest:
    amount_requested: Any
    bank_account_id: str
    remarks: str = "Payout request"
    submitted_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class CheckoutSession:
    order_id: str
    payment_session_id: Optional[str] = None

    @property
    def is_live(self) -> bool:
        # Missing, stringified-empty and mock sessions never reach the gateway.
        sid = self.payment_session_id
        if not sid:
            return False
        sid = str(sid)
        return sid not in _NON_LIVE_SESSION_IDS and not sid.startswith("mock_")


@dataclass(frozen=True)
class TransactionResult:
    kind: TransactionKind
    phase: TransactionPhase
    reason: Optional[str] = None
    breakdown: Optional[MonetaryBreakdown] = None
    status: Optional[InternalStatus] = None
    reference_id: Optional[str] = None
    checkout: Optional[CheckoutSession] = None
    retryable: bool = False
    error_code: Optional[str] = None
    trail: Tuple[TransactionPhase, ...] = ()

    @property
    def outcome(self) -> Optional[Outcome]:
        if self.phase == TransactionPhase.SUCCEEDED:
            return Outcome.SUCCEEDED
        if self.phase == TransactionPhase.FAILED:
            return Outcome.FAILED
        if self.phase == TransactionPhase.INDETERMINATE:
            return Outcome.INDETERMINATE
        return None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "phase": self.phase.value,
            "outcome": self.outcome.value if self.outcome else None,
            "status": self.status.value if self.status else None,
            "reason": self.reason,
            "error_code": self.error_code,
            "retryable": self.retryable,
            "reference_id": self.reference_id,
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "payment_session_id": (
                self.checkout.payment_session_id
                if self.checkout and self.checkout.is_live
                else None
            ),
        }
