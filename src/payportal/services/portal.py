# src/payportal/services/portal.py

import logging
from typing import Optional

import requests

from payportal.core.session import AuthSession
from payportal.models.user import AuthContext
from payportal.services.backend_client import BackendClient
from payportal.services.onboarding_gate import RetailerOnboardingGate
from payportal.services.orchestrator import CheckoutHandler, TransactionOrchestrator
from payportal.services.verification_gate import VerificationGate

logger = logging.getLogger(__name__)


class PortalCore:
    """
    Wires the gate, orchestrator and onboarding gate to one ``AuthSession``.

    The components are built from the session's current ``AuthContext`` and
    rebuilt whenever the session publishes a change, so a sign-out or role
    change is seen by the next operation without any polling.
    """

    def __init__(
        self,
        session: AuthSession,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_session: Optional[requests.Session] = None,
        checkout_handler: Optional[CheckoutHandler] = None,
    ):
        self.session = session
        self.base_url = base_url
        self.timeout = timeout
        self.http_session = http_session
        self.checkout_handler = checkout_handler
        self._build(session.current())
        self._subscription = session.subscribe(self._build)

    def _build(self, context: AuthContext) -> None:
        client = BackendClient(
            context,
            base_url=self.base_url,
            timeout=self.timeout,
            session=self.http_session,
        )
        self.gate = VerificationGate(client)
        self.orchestrator = TransactionOrchestrator(self.gate, checkout_handler=self.checkout_handler)
        self.onboarding = RetailerOnboardingGate(self.gate)
        logger.debug("Portal components built for %s", context)

    @property
    def client(self) -> BackendClient:
        return self.gate.client

    def close(self) -> None:
        self.session.unsubscribe(self._subscription)
