from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class BankAccount:
    account_id: str
    account_holder_name: Optional[str] = None
    masked_number: Optional[str] = None
    ifsc: Optional[str] = None
    status: Optional[str] = None
    master_status: Optional[str] = None
    verification_status: Optional[str] = None
    admin_status: Optional[str] = None
    is_active: Optional[bool] = None

    @property
    def is_verified(self) -> bool:
        return (
            self.status == "verified"
            or self.master_status == "verified"
            or self.verification_status == "verified"
            or self.admin_status == "approved"
        )

    @property
    def is_payout_eligible(self) -> bool:
        # An absent isActive flag counts as active; only an explicit False excludes.
        return self.is_verified and self.is_active is not False

    def __str__(self):
        return f"BankAccount({self.account_id}, {self.masked_number or '****'})"


def payout_eligible(accounts: List[BankAccount]) -> List[BankAccount]:
    return [account for account in accounts if account.is_payout_eligible]


def default_payout_account(accounts: List[BankAccount]) -> Optional[BankAccount]:
    eligible = payout_eligible(accounts)
    return eligible[0] if eligible else None
