from typing import Optional


class PortalError(Exception):
    """Base error for the portal core: a stable code plus a user-facing message."""

    code = "PORTAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code or self.code
        self.message = message


class AuthorizationError(PortalError):
    code = "NOT_AUTHORIZED"


class ComputationError(PortalError):
    code = "COMPUTATION_ERROR"


class InvalidAmount(ComputationError):
    code = "INVALID_AMOUNT"


class BelowMinimum(ComputationError):
    code = "BELOW_MINIMUM"

    def __init__(self, principal, minimum):
        super().__init__(f"Minimum amount is {minimum:.2f}, got {principal:.2f}")
        self.principal = principal
        self.minimum = minimum


class InsufficientBalance(ComputationError):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, required, available):
        super().__init__("Insufficient balance for this payout")
        self.required = required
        self.available = available


class BackendError(PortalError):
    """The backend answered with an error or could not be reached."""

    code = "BACKEND_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message, code)
        self.status_code = status_code


class BackendUnavailable(BackendError):
    code = "BACKEND_UNAVAILABLE"


class BackendTimeout(BackendError):
    code = "BACKEND_TIMEOUT"


class ProviderError(PortalError):
    code = "PROVIDER_ERROR"
