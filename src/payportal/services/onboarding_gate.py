from dataclasses import dataclass
from typing import Optional

from payportal.models.verification import AuthorizationDecision, GatedAction
from payportal.services.verification_gate import VerificationGate

ROLE_NOT_PERMITTED = "Only master accounts can add retailers."
VERIFY_BANK_BANNER = "Complete bank verification to add retailers."


@dataclass(frozen=True)
class OnboardingDecision:
    allowed: bool
    reason: Optional[str] = None
    banner: Optional[str] = None  # shown to the user instead of silently disabling the form


class RetailerOnboardingGate:
    """Decides whether the signed-in account may create retailer sub-accounts."""

    def __init__(self, gate: VerificationGate):
        self.gate = gate

    def check(self) -> OnboardingDecision:
        auth = self.gate.client.auth
        if auth.is_authenticated and not auth.can_manage_retailers:
            return OnboardingDecision(allowed=False, reason=ROLE_NOT_PERMITTED, banner=ROLE_NOT_PERMITTED)

        decision: AuthorizationDecision = self.gate.authorize(GatedAction.ONBOARD_RETAILER)
        if decision.allowed:
            return OnboardingDecision(allowed=True)

        if decision.state is not None and decision.state.error is None:
            banner = VERIFY_BANK_BANNER
        else:
            banner = decision.reason
        return OnboardingDecision(allowed=False, reason=decision.reason, banner=banner)
