import unittest
from unittest.mock import Mock

from payportal.api.schemas import DashboardPayload
from payportal.core.errors import BackendUnavailable
from payportal.models.user import AuthContext, Role
from payportal.services.backend_client import BackendClient
from payportal.services.onboarding_gate import (
    ROLE_NOT_PERMITTED,
    VERIFY_BANK_BANNER,
    RetailerOnboardingGate,
)
from payportal.services.verification_gate import VerificationGate


def make_gate(role=Role.MASTER, bank="verified"):
    client = Mock(spec=BackendClient)
    client.auth = AuthContext(token="token-123", role=role)
    client.get_dashboard.return_value = DashboardPayload.model_validate({
        "kyc": {"status": "pending"},
        "bank": {"verificationStatus": bank},
    })
    return VerificationGate(client)


class TestRetailerOnboardingGate(unittest.TestCase):

    def test_verified_master_may_onboard(self):
        decision = RetailerOnboardingGate(make_gate()).check()
        self.assertTrue(decision.allowed)
        self.assertIsNone(decision.banner)

    def test_unverified_master_gets_actionable_banner(self):
        decision = RetailerOnboardingGate(make_gate(bank="pending")).check()
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.banner, VERIFY_BANK_BANNER)

    def test_status_fetch_failure_is_explained(self):
        gate = make_gate()
        gate.client.get_dashboard.side_effect = BackendUnavailable("Could not reach backend")
        decision = RetailerOnboardingGate(gate).check()
        self.assertFalse(decision.allowed)
        self.assertIn("Could not reach backend", decision.banner)

    def test_retailer_role_cannot_onboard(self):
        gate = make_gate(role=Role.RETAILER)
        decision = RetailerOnboardingGate(gate).check()
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, ROLE_NOT_PERMITTED)
        gate.client.get_dashboard.assert_not_called()

    def test_admin_may_onboard(self):
        self.assertTrue(RetailerOnboardingGate(make_gate(role=Role.ADMIN)).check().allowed)

if __name__ == '__main__':
    unittest.main()
