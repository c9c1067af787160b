from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    # Backend documents carry many more fields than the core reads.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Backend responses
# ---------------------------------------------------------------------------
class KycSection(_Payload):
    status: Optional[str] = None


class BankSection(_Payload):
    verification_status: Optional[str] = Field(default=None, alias="verificationStatus")


class StatsSection(_Payload):
    available_balance: Optional[Decimal] = Field(default=None, alias="availableBalance")


class DashboardPayload(_Payload):
    kyc: Optional[KycSection] = None
    bank: Optional[BankSection] = None
    stats: Optional[StatsSection] = None


class BankAccountPayload(_Payload):
    id: str = Field(alias="_id")
    account_holder_name: Optional[str] = Field(default=None, alias="accountHolderName")
    account_number: Optional[str] = Field(default=None, alias="accountNumber")
    ifsc: Optional[str] = None
    status: Optional[str] = None
    master_status: Optional[str] = Field(default=None, alias="masterStatus")
    verification_status: Optional[str] = Field(default=None, alias="verificationStatus")
    admin_status: Optional[str] = Field(default=None, alias="adminStatus")
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class BankAccountListPayload(_Payload):
    accounts: List[BankAccountPayload] = Field(default_factory=list)


class OrderPayload(_Payload):
    order_id: str = Field(alias="orderId")
    payment_session_id: Optional[str] = Field(default=None, alias="paymentSessionId")


class VerifyPayload(_Payload):
    status: Optional[str] = None
    order_id: Optional[str] = Field(default=None, alias="orderId")


class PayoutPayload(_Payload):
    id: Optional[str] = Field(default=None, alias="_id")
    payout_id: Optional[str] = Field(default=None, alias="payoutId")
    status: Optional[str] = None
    cashfree_status: Optional[str] = Field(default=None, alias="cashfreeStatus")

    @property
    def reference(self) -> Optional[str]:
        return self.payout_id or self.id

    def status_record(self) -> Dict[str, Any]:
        return {"status": self.status, "cashfreeStatus": self.cashfree_status}


# ---------------------------------------------------------------------------
# Portal adapter requests/responses
# ---------------------------------------------------------------------------
class QuoteRequestSchema(BaseModel):
    amount: Union[str, int, float]


class PaymentRequestSchema(BaseModel):
    amount: Union[str, int, float]
    customer_mobile: Optional[str] = None
    remarks: Optional[str] = None
    customer: Dict[str, str] = Field(default_factory=dict)


class PayoutRequestSchema(BaseModel):
    amount: Union[str, int, float]
    bank_account_id: str
    remarks: str = "Payout request"


class ErrorResponseSchema(BaseModel):
    code: str
    detail: str


class EligibilityResponseSchema(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    banner: Optional[str] = None
