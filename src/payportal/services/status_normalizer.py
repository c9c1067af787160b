# src/payportal/services/status_normalizer.py
from typing import Any, Mapping, Optional

from payportal.models.status import InternalStatus, Outcome

# Provider codes are upper-snake-case and matched exactly. A code outside this
# table (including a re-cased known code) comes back as UNKNOWN.
PROVIDER_STATUS_MAP = {
    "SUCCESS": InternalStatus.COMPLETED,
    "COMPLETED": InternalStatus.COMPLETED,
    "PAID": InternalStatus.COMPLETED,
    "SENT_TO_BENEFICIARY": InternalStatus.SENT_TO_BENEFICIARY,
    "FAILED": InternalStatus.FAILED,
    "REVERSED": InternalStatus.REVERSED,
    "REJECTED": InternalStatus.REJECTED,
    "RECEIVED": InternalStatus.RECEIVED,
    "APPROVAL_PENDING": InternalStatus.APPROVAL_PENDING,
    "PENDING": InternalStatus.PENDING,
    "PROCESSING": InternalStatus.PROCESSING,
}

# The backend's own payout ``status`` field uses a separate lower-case vocabulary.
BACKEND_STATUS_MAP = {
    "pending": InternalStatus.PENDING,
    "approved": InternalStatus.PROCESSING,
    "processing": InternalStatus.PROCESSING,
    "completed": InternalStatus.COMPLETED,
    "failed": InternalStatus.FAILED,
    "rejected": InternalStatus.REJECTED,
    "reversed": InternalStatus.REVERSED,
}

_OUTCOMES = {
    InternalStatus.COMPLETED: Outcome.SUCCEEDED,
    InternalStatus.RECEIVED: Outcome.SUCCEEDED,
    InternalStatus.FAILED: Outcome.FAILED,
    InternalStatus.REJECTED: Outcome.FAILED,
    InternalStatus.REVERSED: Outcome.FAILED,
}


def normalize(raw_status: Any) -> InternalStatus:
    if not isinstance(raw_status, str):
        return InternalStatus.UNKNOWN
    return PROVIDER_STATUS_MAP.get(raw_status, InternalStatus.UNKNOWN)


def normalize_backend(raw_status: Any) -> InternalStatus:
    if not isinstance(raw_status, str):
        return InternalStatus.UNKNOWN
    return BACKEND_STATUS_MAP.get(raw_status, InternalStatus.UNKNOWN)


def normalize_record(record: Optional[Mapping[str, Any]]) -> InternalStatus:
    """
    Normalize a payout/transaction record from the backend.

    The provider's own code (``cashfreeStatus``) wins when present and goes
    through the provider table. Otherwise the backend's ``status`` field is
    read with the backend table.
    """
    if not isinstance(record, Mapping):
        return InternalStatus.UNKNOWN
    provider_status = record.get("cashfreeStatus")
    if provider_status:
        return normalize(provider_status)
    return normalize_backend(record.get("status"))


def classify(status: InternalStatus) -> Outcome:
    return _OUTCOMES.get(status, Outcome.INDETERMINATE)


class StatusNormalizer:
    """Object form of ``normalize`` for injection into the orchestrator."""

    def normalize(self, raw_status: Any) -> InternalStatus:
        return normalize(raw_status)

    def normalize_record(self, record: Optional[Mapping[str, Any]]) -> InternalStatus:
        return normalize_record(record)

    def classify(self, status: InternalStatus) -> Outcome:
        return classify(status)
