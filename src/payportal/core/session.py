import logging
import uuid
from typing import Callable, Dict, Optional

from payportal.models.user import AuthContext, Role

logger = logging.getLogger(__name__)

Listener = Callable[[AuthContext], None]


class AuthSession:
    """
    Holder of the signed-in user's token and role.

    Components never read credentials from ambient storage. They take the
    ``AuthContext`` returned by ``current()`` at construction time, and
    subscribe here to learn about sign-in, sign-out or role changes.

    Methods:
    - sign_in(token, role, user_id) -> AuthContext
    - sign_out() -> None
    - current() -> AuthContext
    - subscribe(listener) -> subscription id
    - unsubscribe(subscription id) -> None
    """
    def __init__(self, context: Optional[AuthContext] = None):
        self._context: AuthContext = context or AuthContext.anonymous()
        self._listeners: Dict[str, Listener] = {}

    def current(self) -> AuthContext:
        return self._context

    def sign_in(self, token: str, role: Optional[str] = None, user_id: Optional[str] = None) -> AuthContext:
        if not token:
            raise ValueError("token is required to sign in")
        self._set(AuthContext(token=token, role=Role.parse(role), user_id=user_id))
        return self._context

    def sign_out(self) -> None:
        self._set(AuthContext.anonymous())

    def update_role(self, role: str) -> AuthContext:
        ctx = self._context
        self._set(AuthContext(token=ctx.token, role=Role.parse(role), user_id=ctx.user_id))
        return self._context

    def subscribe(self, listener: Listener) -> str:
        subscription_id = uuid.uuid4().hex
        self._listeners[subscription_id] = listener
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> None:
        self._listeners.pop(subscription_id, None)

    def _set(self, context: AuthContext) -> None:
        if context == self._context:
            return
        self._context = context
        logger.info("Session changed: %s", context)
        for listener in list(self._listeners.values()):
            listener(context)
