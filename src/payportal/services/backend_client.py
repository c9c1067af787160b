# src/payportal/services/backend_client.py

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from payportal.api.schemas import (
    BankAccountListPayload,
    DashboardPayload,
    OrderPayload,
    PayoutPayload,
    VerifyPayload,
)
from payportal.config import Config
from payportal.core.errors import BackendError, BackendTimeout, BackendUnavailable
from payportal.models.account import BankAccount
from payportal.models.fees import MonetaryBreakdown
from payportal.models.transaction import CheckoutSession, PaymentOrder, PayoutRequest
from payportal.models.user import AuthContext

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Thin wrapper around the portal's REST backend.

    - Every call is a fresh HTTP round trip; nothing is cached here.
    - Each call has an explicit timeout.
    - Transport problems are raised as ``BackendTimeout`` / ``BackendUnavailable``,
      HTTP error statuses as ``BackendError`` carrying the backend's message.
    """

    def __init__(
        self,
        auth: AuthContext,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.auth = auth
        self.base_url = (base_url or Config.BACKEND_URL).rstrip("/")
        self.timeout = Config.HTTP_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.auth.token:
            headers["Authorization"] = f"Bearer {self.auth.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.Timeout as e:
            logger.warning("Backend timeout on %s %s", method, path)
            raise BackendTimeout(f"Backend did not respond in time ({path})") from e
        except requests.RequestException as e:
            logger.warning("Backend unreachable on %s %s: %s", method, path, e)
            raise BackendUnavailable(f"Could not reach backend ({path})") from e

        if resp.status_code >= 400:
            body = _safe_json(resp)
            message = body.get("message") if isinstance(body, dict) else None
            code = body.get("code") if isinstance(body, dict) else None
            raise BackendError(
                message or f"Backend returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                code=code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(f"Backend returned a non-JSON body ({path})") from e

    def _parse(self, model, data: Any):
        try:
            return model.model_validate(_unwrap(data))
        except ValidationError as e:
            raise BackendError(f"Unexpected backend response for {model.__name__}") from e

    # ------------------------------------------------------------------
    # Account state
    # ------------------------------------------------------------------
    def get_dashboard(self) -> DashboardPayload:
        return self._parse(DashboardPayload, self._request("GET", "auth/dashboard"))

    def list_bank_accounts(self) -> List[BankAccount]:
        payload = self._parse(BankAccountListPayload, self._request("GET", "bank"))
        return [
            BankAccount(
                account_id=item.id,
                account_holder_name=item.account_holder_name,
                masked_number=_mask(item.account_number),
                ifsc=item.ifsc,
                status=item.status,
                master_status=item.master_status,
                verification_status=item.verification_status,
                admin_status=item.admin_status,
                is_active=item.is_active,
            )
            for item in payload.accounts
        ]

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------
    def create_order(self, order: PaymentOrder, breakdown: MonetaryBreakdown) -> CheckoutSession:
        body: Dict[str, Any] = {
            "amount": str(breakdown.total_debit),
            "baseAmount": str(breakdown.principal),
            "feeAmount": str(breakdown.fee),
            "gstAmount": str(breakdown.gst),
            "currency": order.currency,
        }
        customer = dict(order.customer)
        if order.customer_mobile:
            customer.setdefault("phone", order.customer_mobile)
        if customer:
            body["customer"] = customer
        if order.remarks:
            body["remarks"] = order.remarks

        payload = self._parse(OrderPayload, self._request("POST", "payments/order", json=body))
        return CheckoutSession(order_id=payload.order_id, payment_session_id=payload.payment_session_id)

    def verify_payment(self, order_id: str) -> VerifyPayload:
        data = self._request("POST", "payments/verify", json={"orderId": order_id})
        return self._parse(VerifyPayload, data)

    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------
    def create_payout(self, request: PayoutRequest, breakdown: MonetaryBreakdown) -> PayoutPayload:
        body = {
            "amount": str(breakdown.total_debit),
            "bankAccountId": request.bank_account_id,
            "remarks": request.remarks,
        }
        return self._parse(PayoutPayload, self._request("POST", "payouts", json=body))

    def get_payout(self, payout_id: str) -> PayoutPayload:
        return self._parse(PayoutPayload, self._request("GET", f"payouts/{payout_id}"))

    def check_payout_status(self, payout_id: str) -> PayoutPayload:
        try:
            data = self._request("GET", f"payouts/{payout_id}/check-status")
        except BackendError as e:
            if e.code == "transfer_id does not exist":
                raise BackendError(
                    "Transfer not found at the provider. The payout may not have been processed yet.",
                    status_code=e.status_code,
                    code=e.code,
                ) from e
            raise
        return self._parse(PayoutPayload, data)

    def list_payouts(self, page: int = 1, limit: int = 10, status: Optional[str] = None) -> Any:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        return self._request("GET", "payouts", params=params)


def _safe_json(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _unwrap(data: Any) -> Any:
    # Some endpoints nest the document under "data", "order" or "payout".
    if isinstance(data, dict):
        for key in ("data", "order", "payout"):
            inner = data.get(key)
            if isinstance(inner, dict):
                return inner
    return data


def _mask(number: Optional[str]) -> Optional[str]:
    if not number:
        return None
    return f"****{number[-4:]}"
