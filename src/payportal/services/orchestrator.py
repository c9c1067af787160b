"""
Transaction orchestrator for payments and payouts.

Both flows walk the same phases, strictly one after another:

    idle -> authorizing -> computing -> submitting
         -> [awaiting_provider] -> verifying -> succeeded | failed | indeterminate

Core rules:
- Nothing is sent to the backend until authorization and fee computation
  have both succeeded for *this* attempt.
- The amount submitted is the ``total_debit`` computed in the same call,
  never a figure remembered from an earlier screen.
- The final outcome always comes from a backend verification read. A
  provider "success" callback only tells us to go and ask.
- One attempt per user action. Network failures are reported, not retried;
  timeouts are reported as indeterminate because the money may still move.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from payportal.config import payment_fee_schedule, payout_fee_schedule
from payportal.core.errors import (
    AuthorizationError,
    BackendError,
    BackendTimeout,
    ComputationError,
    PortalError,
    ProviderError,
)
from payportal.models.fees import FeeSchedule, MonetaryBreakdown
from payportal.models.status import InternalStatus, Outcome
from payportal.models.transaction import (
    CheckoutSession,
    PaymentOrder,
    PayoutRequest,
    TransactionKind,
    TransactionPhase,
    TransactionResult,
)
from payportal.models.verification import GatedAction
from payportal.services.backend_client import BackendClient
from payportal.services.fee_calculator import FeeCalculator
from payportal.services.status_normalizer import StatusNormalizer
from payportal.services.verification_gate import VerificationGate

logger = logging.getLogger(__name__)

# Called with a live checkout session; returns once the gateway's checkout
# UI reports back (success or cancel). Raises ProviderError if it cannot run.
CheckoutHandler = Callable[[CheckoutSession], Any]

IN_PROGRESS = "Transaction is in progress. Check the history page for the final status."
SUBMIT_TIMED_OUT = "The request timed out before the backend answered. Check the history page before trying again."

_OUTCOME_PHASES = {
    Outcome.SUCCEEDED: TransactionPhase.SUCCEEDED,
    Outcome.FAILED: TransactionPhase.FAILED,
    Outcome.INDETERMINATE: TransactionPhase.INDETERMINATE,
}


class _Flow:
    """Phase bookkeeping for a single orchestrated attempt."""

    def __init__(self, kind: TransactionKind, start: TransactionPhase = TransactionPhase.IDLE):
        self.kind = kind
        self.trail: List[TransactionPhase] = [start]
        self.breakdown: Optional[MonetaryBreakdown] = None
        self.reference_id: Optional[str] = None
        self.checkout: Optional[CheckoutSession] = None

    @property
    def phase(self) -> TransactionPhase:
        return self.trail[-1]

    def enter(self, phase: TransactionPhase) -> None:
        logger.info("%s %s: %s -> %s", self.kind.value, self.reference_id or "-", self.phase.value, phase.value)
        self.trail.append(phase)

    def finish(self, phase: TransactionPhase, **fields) -> TransactionResult:
        self.enter(phase)
        return TransactionResult(
            kind=self.kind,
            phase=phase,
            breakdown=self.breakdown,
            reference_id=self.reference_id,
            checkout=self.checkout,
            trail=tuple(self.trail),
            **fields,
        )

    def failed(self, error: PortalError, retryable: bool = False) -> TransactionResult:
        return self.finish(
            TransactionPhase.FAILED,
            reason=error.message,
            error_code=error.code,
            retryable=retryable,
        )

    def pause(self) -> TransactionResult:
        # Control leaves the application; no terminal phase yet.
        return TransactionResult(
            kind=self.kind,
            phase=self.phase,
            breakdown=self.breakdown,
            reference_id=self.reference_id,
            checkout=self.checkout,
            trail=tuple(self.trail),
        )


class TransactionOrchestrator:
    """
    Drives one payment or payout attempt from the user's submit click to a
    verified outcome.

    Parameters
    ----------
    gate : VerificationGate
        Re-checked at the start of every attempt.
    calculator : FeeCalculator, optional
    normalizer : StatusNormalizer, optional
    payment_schedule, payout_schedule : FeeSchedule, optional
        Default to the schedules built from ``Config``.
    checkout_handler : callable, optional
        Opens the gateway checkout for live sessions. Without one, a live
        payment stops at ``awaiting_provider`` and is finished later by
        ``resume_payment`` (redirect-based checkout).
    """

    def __init__(
        self,
        gate: VerificationGate,
        calculator: Optional[FeeCalculator] = None,
        normalizer: Optional[StatusNormalizer] = None,
        payment_schedule: Optional[FeeSchedule] = None,
        payout_schedule: Optional[FeeSchedule] = None,
        checkout_handler: Optional[CheckoutHandler] = None,
    ) -> None:
        self.gate = gate
        self.calculator = calculator or FeeCalculator()
        self.normalizer = normalizer or StatusNormalizer()
        self.payment_schedule = payment_schedule or payment_fee_schedule()
        self.payout_schedule = payout_schedule or payout_fee_schedule()
        self.checkout_handler = checkout_handler

    @property
    def client(self) -> BackendClient:
        return self.gate.client

    # ------------------------------------------------------------------
    # Quotes (pure, for the confirmation screen)
    # ------------------------------------------------------------------
    def quote_payment(self, amount: Any) -> MonetaryBreakdown:
        return self.calculator.compute_payment(amount, self.payment_schedule)

    def quote_payout(self, amount: Any) -> MonetaryBreakdown:
        return self.calculator.compute_payout(amount, self.payout_schedule)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------
    def submit_payment(self, order: PaymentOrder) -> TransactionResult:
        flow = _Flow(TransactionKind.PAYMENT)

        flow.enter(TransactionPhase.AUTHORIZING)
        decision = self.gate.authorize(GatedAction.PAY)
        if not decision.allowed:
            return self._not_authorized(flow, decision.reason)

        flow.enter(TransactionPhase.COMPUTING)
        try:
            flow.breakdown = self.calculator.compute_payment(order.amount_requested, self.payment_schedule)
        except ComputationError as e:
            return flow.failed(e)

        flow.enter(TransactionPhase.SUBMITTING)
        try:
            checkout = self.client.create_order(order, flow.breakdown)
        except BackendTimeout:
            return flow.finish(TransactionPhase.INDETERMINATE, reason=SUBMIT_TIMED_OUT)
        except BackendError as e:
            return flow.failed(e, retryable=True)
        flow.checkout = checkout
        flow.reference_id = checkout.order_id

        if checkout.is_live:
            flow.enter(TransactionPhase.AWAITING_PROVIDER)
            if self.checkout_handler is None:
                return flow.pause()
            try:
                self.checkout_handler(checkout)
            except ProviderError as e:
                logger.warning(
                    "Checkout failed for order %s (%s), verifying with backend",
                    checkout.order_id,
                    e.message,
                )
        else:
            logger.info("Order %s has no live checkout session, verifying directly", checkout.order_id)

        return self._verify_payment(flow)

    def resume_payment(self, order_id: str) -> TransactionResult:
        """
        Finish a payment after the gateway hands control back (redirect,
        callback, or the user reopening the page). Always asks the backend.
        """
        if not order_id:
            raise ValueError("order_id is required to resume a payment")
        flow = _Flow(TransactionKind.PAYMENT)
        flow.reference_id = order_id
        return self._verify_payment(flow)

    def _verify_payment(self, flow: _Flow) -> TransactionResult:
        flow.enter(TransactionPhase.VERIFYING)
        try:
            verified = self.client.verify_payment(flow.reference_id)
        except BackendError as e:
            logger.warning("Could not verify order %s: %s", flow.reference_id, e.message)
            return flow.finish(TransactionPhase.INDETERMINATE, status=InternalStatus.UNKNOWN, reason=IN_PROGRESS)
        return self._settle(flow, self.normalizer.normalize(verified.status))

    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------
    def submit_payout(self, request: PayoutRequest) -> TransactionResult:
        flow = _Flow(TransactionKind.PAYOUT)

        flow.enter(TransactionPhase.AUTHORIZING)
        decision = self.gate.authorize(GatedAction.PAYOUT)
        if not decision.allowed:
            return self._not_authorized(flow, decision.reason)

        flow.enter(TransactionPhase.COMPUTING)
        try:
            flow.breakdown = self.calculator.compute_payout(request.amount_requested, self.payout_schedule)
            self.calculator.check_balance(flow.breakdown, decision.state.available_balance)
        except ComputationError as e:
            return flow.failed(e)
        if not request.bank_account_id:
            return flow.failed(PortalError("Please select a verified bank account", code="BANK_ACCOUNT_REQUIRED"))

        flow.enter(TransactionPhase.SUBMITTING)
        try:
            payout = self.client.create_payout(request, flow.breakdown)
        except BackendTimeout:
            return flow.finish(TransactionPhase.INDETERMINATE, reason=SUBMIT_TIMED_OUT)
        except BackendError as e:
            return flow.failed(e, retryable=True)
        flow.reference_id = payout.reference

        if not flow.reference_id:
            logger.warning("Payout accepted without an id, cannot verify")
            return flow.finish(TransactionPhase.INDETERMINATE, status=InternalStatus.UNKNOWN, reason=IN_PROGRESS)
        return self._verify_payout(flow)

    def verify_payout(self, payout_id: str) -> TransactionResult:
        if not payout_id:
            raise ValueError("payout_id is required to verify a payout")
        flow = _Flow(TransactionKind.PAYOUT)
        flow.reference_id = payout_id
        return self._verify_payout(flow)

    def check_payout_status(self, payout_id: str) -> TransactionResult:
        """Manual refresh: ask the provider, through the backend, where the transfer is."""
        if not payout_id:
            raise ValueError("payout_id is required to check a payout")
        flow = _Flow(TransactionKind.PAYOUT)
        flow.reference_id = payout_id
        flow.enter(TransactionPhase.VERIFYING)
        try:
            payout = self.client.check_payout_status(payout_id)
        except BackendError as e:
            return flow.finish(TransactionPhase.INDETERMINATE, status=InternalStatus.UNKNOWN, reason=e.message)
        return self._settle(flow, self.normalizer.normalize_record(payout.status_record()))

    def _verify_payout(self, flow: _Flow) -> TransactionResult:
        flow.enter(TransactionPhase.VERIFYING)
        try:
            payout = self.client.get_payout(flow.reference_id)
        except BackendError as e:
            logger.warning("Could not verify payout %s: %s", flow.reference_id, e.message)
            return flow.finish(TransactionPhase.INDETERMINATE, status=InternalStatus.UNKNOWN, reason=IN_PROGRESS)
        return self._settle(flow, self.normalizer.normalize_record(payout.status_record()))

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------
    def _settle(self, flow: _Flow, status: InternalStatus) -> TransactionResult:
        phase = _OUTCOME_PHASES[self.normalizer.classify(status)]
        reason = None
        if phase == TransactionPhase.INDETERMINATE:
            reason = IN_PROGRESS
        elif phase == TransactionPhase.FAILED:
            reason = f"Transaction {status.value}"
        return flow.finish(phase, status=status, reason=reason)

    def _not_authorized(self, flow: _Flow, reason: Optional[str]) -> TransactionResult:
        logger.info("%s blocked before submission: %s", flow.kind.value, reason)
        return flow.failed(AuthorizationError(f"not authorized: {reason}"))
