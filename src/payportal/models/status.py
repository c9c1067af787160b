# src/payportal/models/status.py
from enum import Enum


class InternalStatus(str, Enum):
    COMPLETED = "completed"
    SENT_TO_BENEFICIARY = "sent_to_beneficiary"
    FAILED = "failed"
    REVERSED = "reversed"
    REJECTED = "rejected"
    RECEIVED = "received"
    APPROVAL_PENDING = "approval_pending"
    PENDING = "pending"
    PROCESSING = "processing"
    UNKNOWN = "unknown"


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INDETERMINATE = "indeterminate"
