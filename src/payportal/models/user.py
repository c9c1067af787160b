from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "user"
    RETAILER = "retailer"
    MASTER = "master"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        try:
            return cls(value)
        except ValueError:
            return cls.USER


@dataclass(frozen=True)
class AuthContext:
    """Credentials and role of the signed-in user, read once per page/request."""
    token: Optional[str] = None
    role: Role = Role.USER
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def can_manage_retailers(self) -> bool:
        return self.role in (Role.MASTER, Role.ADMIN)

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def from_bearer(cls, header: Optional[str], role: Optional[str] = None, user_id: Optional[str] = None) -> "AuthContext":
        token = None
        if header and header.lower().startswith("bearer "):
            token = header[7:].strip() or None
        return cls(token=token, role=Role.parse(role), user_id=user_id)

    def __str__(self):
        return f"AuthContext(user={self.user_id}, role={self.role.value})"
