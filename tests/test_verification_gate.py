import unittest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

from payportal.api.schemas import DashboardPayload
from payportal.core.errors import BackendError, BackendTimeout, BackendUnavailable
from payportal.models.user import AuthContext
from payportal.models.verification import BankStatus, GatedAction, KycStatus
from payportal.services.backend_client import BackendClient
from payportal.services.verification_gate import VerificationGate, parse_bank_status, parse_kyc_status


def dashboard(kyc="approved", bank="verified", balance=1000):
    return DashboardPayload.model_validate({
        "kyc": {"status": kyc},
        "bank": {"verificationStatus": bank},
        "stats": {"availableBalance": balance},
    })


def make_client(token="token-123"):
    client = Mock(spec=BackendClient)
    client.auth = AuthContext(token=token)
    return client


class TestRefresh(unittest.TestCase):

    def setUp(self):
        self.client = make_client()
        self.fixed_now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.gate = VerificationGate(self.client, clock=lambda: self.fixed_now)

    def test_state_from_dashboard(self):
        self.client.get_dashboard.return_value = dashboard(kyc="pending", bank="verified", balance="300.50")
        state = self.gate.refresh()
        self.assertEqual(state.kyc_status, KycStatus.PENDING)
        self.assertEqual(state.bank_status, BankStatus.VERIFIED)
        self.assertTrue(state.can_transact)
        self.assertEqual(state.available_balance, Decimal("300.50"))
        self.assertEqual(state.last_refreshed_at, self.fixed_now)
        self.assertIsNone(state.error)

    def test_every_refresh_hits_the_backend(self):
        self.client.get_dashboard.return_value = dashboard()
        self.gate.refresh()
        self.gate.refresh()
        self.assertEqual(self.client.get_dashboard.call_count, 2)

    def test_missing_sections_default_to_pending(self):
        self.client.get_dashboard.return_value = DashboardPayload.model_validate({})
        state = self.gate.refresh()
        self.assertEqual(state.kyc_status, KycStatus.PENDING)
        self.assertEqual(state.bank_status, BankStatus.PENDING)
        self.assertFalse(state.can_transact)
        self.assertEqual(state.available_balance, Decimal("0"))

    def test_fetch_failure_gives_error_state(self):
        self.client.get_dashboard.side_effect = BackendUnavailable("Could not reach backend")
        state = self.gate.refresh()
        self.assertEqual(state.error, "Could not reach backend")
        self.assertFalse(state.can_transact)
        self.assertIs(self.gate.last_state, state)


class TestAuthorize(unittest.TestCase):

    def setUp(self):
        self.client = make_client()
        self.gate = VerificationGate(self.client)

    def test_bank_verified_allows_all_actions(self):
        self.client.get_dashboard.return_value = dashboard()
        for action in ("pay", "payout", "onboard_retailer"):
            with self.subTest(action=action):
                decision = self.gate.authorize(action)
                self.assertTrue(decision.allowed)
                self.assertIsNone(decision.reason)

    def test_kyc_does_not_gate_transacting(self):
        self.client.get_dashboard.return_value = dashboard(kyc="not_submitted", bank="verified")
        self.assertTrue(self.gate.authorize(GatedAction.PAY).allowed)

    def test_kyc_approved_without_bank_is_denied(self):
        self.client.get_dashboard.return_value = dashboard(kyc="approved", bank="pending")
        decision = self.gate.authorize(GatedAction.PAYOUT)
        self.assertFalse(decision.allowed)
        self.assertIn("bank verification", decision.reason)

    def test_failed_bank_is_denied(self):
        self.client.get_dashboard.return_value = dashboard(bank="failed")
        self.assertFalse(self.gate.authorize("pay").allowed)

    def test_previous_approval_is_not_reused_after_fetch_failure(self):
        self.client.get_dashboard.side_effect = [dashboard(), BackendTimeout("timed out")]
        self.assertTrue(self.gate.authorize("pay").allowed)
        decision = self.gate.authorize("pay")
        self.assertFalse(decision.allowed)
        self.assertIn("timed out", decision.reason)

    def test_backend_error_fails_closed(self):
        self.client.get_dashboard.side_effect = BackendError("Internal error", status_code=500)
        self.assertFalse(self.gate.authorize("payout").allowed)

    def test_signed_out_is_denied_without_network_call(self):
        client = make_client(token=None)
        decision = VerificationGate(client).authorize("pay")
        self.assertFalse(decision.allowed)
        client.get_dashboard.assert_not_called()

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            self.gate.authorize("withdraw_everything")


class TestStatusParsing(unittest.TestCase):

    def test_bank_status(self):
        self.assertEqual(parse_bank_status("verified"), BankStatus.VERIFIED)
        self.assertEqual(parse_bank_status("unverified"), BankStatus.NOT_VERIFIED)
        self.assertEqual(parse_bank_status("VERIFIED"), BankStatus.NOT_VERIFIED)
        self.assertEqual(parse_bank_status(None), BankStatus.PENDING)

    def test_kyc_status(self):
        self.assertEqual(parse_kyc_status("rejected"), KycStatus.REJECTED)
        self.assertEqual(parse_kyc_status("verified"), KycStatus.APPROVED)
        self.assertEqual(parse_kyc_status("something-new"), KycStatus.PENDING)

if __name__ == '__main__':
    unittest.main()
