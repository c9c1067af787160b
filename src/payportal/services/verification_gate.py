"""
Verification gate: may this account move money right now?

The gate keeps no authorization state of its own. ``refresh`` reads the
backend every time it is called and ``authorize`` calls ``refresh`` first, so
a decision is never older than the request that produced it. Any failure to
read the backend yields a denied decision (fail closed).

Only the bank verification gates transacting. KYC status is reported but is
deliberately not a precondition for ``pay``, ``payout`` or
``onboard_retailer``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Union

from payportal.core.errors import PortalError
from payportal.models.verification import (
    AuthorizationDecision,
    BankStatus,
    GatedAction,
    KycStatus,
    VerificationState,
)
from payportal.services.backend_client import BackendClient

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = "Please sign in to continue."
BANK_NOT_VERIFIED = "Complete bank verification to {action}."
STATUS_UNAVAILABLE = "Unable to verify account status: {error}"

_ACTION_PHRASES = {
    GatedAction.PAY: "make payments",
    GatedAction.PAYOUT: "request payouts",
    GatedAction.ONBOARD_RETAILER: "add retailers",
}

# Backend wording that differs from the internal vocabulary.
_KYC_ALIASES = {
    "verified": KycStatus.APPROVED,
    "not_started": KycStatus.NOT_SUBMITTED,
    "none": KycStatus.NOT_SUBMITTED,
}
_BANK_ALIASES = {
    "unverified": BankStatus.NOT_VERIFIED,
    "not_added": BankStatus.NOT_VERIFIED,
}


def parse_kyc_status(raw: Optional[str]) -> KycStatus:
    if not raw:
        return KycStatus.PENDING
    try:
        return KycStatus(raw)
    except ValueError:
        return _KYC_ALIASES.get(raw, KycStatus.PENDING)


def parse_bank_status(raw: Optional[str]) -> BankStatus:
    if not raw:
        return BankStatus.PENDING
    try:
        return BankStatus(raw)
    except ValueError:
        return _BANK_ALIASES.get(raw, BankStatus.NOT_VERIFIED)


class VerificationGate:
    def __init__(
        self,
        client: BackendClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        # Result of the most recent read, for display only. Never consulted
        # by authorize().
        self.last_state: Optional[VerificationState] = None

    def refresh(self) -> VerificationState:
        now = self.clock()
        try:
            dashboard = self.client.get_dashboard()
        except PortalError as e:
            logger.warning("Verification refresh failed, denying transactions: %s", e.message)
            state = VerificationState.failed_fetch(e.message, now)
        else:
            kyc = dashboard.kyc
            bank = dashboard.bank
            stats = dashboard.stats
            balance = stats.available_balance if stats and stats.available_balance is not None else Decimal("0")
            state = VerificationState(
                kyc_status=parse_kyc_status(kyc.status if kyc else None),
                bank_status=parse_bank_status(bank.verification_status if bank else None),
                last_refreshed_at=now,
                available_balance=balance,
                kyc=kyc.model_dump(by_alias=True) if kyc else None,
                bank=bank.model_dump(by_alias=True) if bank else None,
            )
            logger.info(
                "Verification refreshed: kyc=%s bank=%s can_transact=%s",
                state.kyc_status.value,
                state.bank_status.value,
                state.can_transact,
            )
        self.last_state = state
        return state

    def authorize(self, action: Union[GatedAction, str]) -> AuthorizationDecision:
        action = GatedAction(action)

        if not self.client.auth.is_authenticated:
            return AuthorizationDecision(allowed=False, action=action, reason=NOT_SIGNED_IN)

        state = self.refresh()
        if state.error is not None:
            return AuthorizationDecision(
                allowed=False,
                action=action,
                reason=STATUS_UNAVAILABLE.format(error=state.error),
                state=state,
            )
        if not state.can_transact:
            return AuthorizationDecision(
                allowed=False,
                action=action,
                reason=BANK_NOT_VERIFIED.format(action=_ACTION_PHRASES[action]),
                state=state,
            )
        return AuthorizationDecision(allowed=True, action=action, state=state)
