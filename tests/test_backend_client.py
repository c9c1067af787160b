import unittest
from decimal import Decimal
from unittest.mock import Mock

import requests

from payportal.core.errors import BackendError, BackendTimeout, BackendUnavailable
from payportal.models.fees import MonetaryBreakdown
from payportal.models.transaction import PaymentOrder, PayoutRequest
from payportal.models.user import AuthContext
from payportal.services.backend_client import BackendClient


def response(status_code=200, body=None):
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


BREAKDOWN = MonetaryBreakdown(
    principal=Decimal("500.00"),
    fee=Decimal("20.00"),
    gst=Decimal("0.00"),
    total_debit=Decimal("520.00"),
    net_credit=Decimal("500.00"),
)


class TestBackendClient(unittest.TestCase):

    def setUp(self):
        self.session = Mock(spec=requests.Session)
        self.client = BackendClient(
            AuthContext(token="tok"),
            base_url="https://portal.example/api/",
            timeout=3,
            session=self.session,
        )

    def test_dashboard_request(self):
        self.session.request.return_value = response(body={
            "kyc": {"status": "approved"},
            "bank": {"verificationStatus": "verified"},
            "stats": {"availableBalance": 250.75},
        })
        dashboard = self.client.get_dashboard()

        method, url = self.session.request.call_args[0]
        kwargs = self.session.request.call_args[1]
        self.assertEqual(method, "GET")
        self.assertEqual(url, "https://portal.example/api/auth/dashboard")
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")
        self.assertEqual(dashboard.bank.verification_status, "verified")
        self.assertEqual(dashboard.stats.available_balance, Decimal("250.75"))

    def test_no_authorization_header_when_signed_out(self):
        client = BackendClient(AuthContext(), base_url="https://portal.example/api", session=self.session)
        self.session.request.return_value = response(body={})
        client.get_dashboard()
        self.assertNotIn("Authorization", self.session.request.call_args[1]["headers"])

    def test_timeout(self):
        self.session.request.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(BackendTimeout):
            self.client.get_dashboard()

    def test_connection_error(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(BackendUnavailable):
            self.client.get_dashboard()

    def test_http_error_carries_backend_message(self):
        self.session.request.return_value = response(500, {"message": "Database unavailable"})
        with self.assertRaises(BackendError) as ctx:
            self.client.get_dashboard()
        self.assertEqual(ctx.exception.message, "Database unavailable")
        self.assertEqual(ctx.exception.status_code, 500)

    def test_http_error_without_json(self):
        self.session.request.return_value = response(502, ValueError("no json"))
        with self.assertRaises(BackendError) as ctx:
            self.client.get_dashboard()
        self.assertIn("502", ctx.exception.message)

    def test_non_json_success_body(self):
        self.session.request.return_value = response(200, ValueError("no json"))
        with self.assertRaises(BackendError):
            self.client.get_dashboard()

    def test_create_order_sends_computed_total(self):
        self.session.request.return_value = response(body={"orderId": "order_9", "paymentSessionId": "session_x"})
        checkout = self.client.create_order(PaymentOrder(amount_requested="500", customer_mobile="9999999999"), BREAKDOWN)

        body = self.session.request.call_args[1]["json"]
        self.assertEqual(body["amount"], "520.00")
        self.assertEqual(body["baseAmount"], "500.00")
        self.assertEqual(body["feeAmount"], "20.00")
        self.assertEqual(body["customer"], {"phone": "9999999999"})
        self.assertEqual(checkout.order_id, "order_9")
        self.assertTrue(checkout.is_live)

    def test_order_missing_id_is_an_error(self):
        self.session.request.return_value = response(body={"paymentSessionId": "session_x"})
        with self.assertRaises(BackendError):
            self.client.create_order(PaymentOrder(amount_requested="500"), BREAKDOWN)

    def test_create_payout_unwraps_nested_document(self):
        self.session.request.return_value = response(body={"message": "ok", "payout": {"_id": "po_7", "status": "PENDING"}})
        payout = self.client.create_payout(PayoutRequest(amount_requested="500", bank_account_id="b1"), BREAKDOWN)
        body = self.session.request.call_args[1]["json"]
        self.assertEqual(body, {"amount": "520.00", "bankAccountId": "b1", "remarks": "Payout request"})
        self.assertEqual(payout.reference, "po_7")

    def test_unknown_transfer_gets_friendly_message(self):
        self.session.request.return_value = response(404, {"code": "transfer_id does not exist"})
        with self.assertRaises(BackendError) as ctx:
            self.client.check_payout_status("po_7")
        self.assertIn("not been processed yet", ctx.exception.message)

    def test_list_bank_accounts(self):
        self.session.request.return_value = response(body={"accounts": [
            {"_id": "b1", "accountNumber": "123456789012", "verificationStatus": "verified"},
            {"_id": "b2", "status": "pending", "isActive": False},
        ]})
        accounts = self.client.list_bank_accounts()
        self.assertEqual(accounts[0].masked_number, "****9012")
        self.assertTrue(accounts[0].is_payout_eligible)
        self.assertFalse(accounts[1].is_payout_eligible)

    def test_list_payouts_passes_filters(self):
        self.session.request.return_value = response(body={"payouts": []})
        self.client.list_payouts(page=2, status="PENDING")
        self.assertEqual(self.session.request.call_args[1]["params"], {"page": 2, "limit": 10, "status": "PENDING"})

if __name__ == '__main__':
    unittest.main()
