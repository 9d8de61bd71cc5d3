from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, EmailStr, Field

from ujala_news.authorization.permissions import Role
from ujala_news.core.schemas.base import CamelModel

if TYPE_CHECKING:
    from .models import Account

SUPERADMIN_SUBJECT = "superadmin"
SUPERADMIN_NAME = "Super Admin"


class AnonymousUser(BaseModel):
    id: None = None
    email: None = None
    name: str = ""
    role: None = None

    @property
    def is_authenticated(self) -> bool:
        """Anonymous users are never authenticated."""
        return False

    @property
    def is_superadmin(self) -> bool:
        return False

    @property
    def display_name(self) -> str:
        return "Anonymous"

    def __str__(self) -> str:
        return "AnonymousUser"

    def __repr__(self) -> str:
        return "<AnonymousUser>"

    def __bool__(self) -> bool:
        """AnonymousUser is falsy in boolean context."""
        return False


class Principal(CamelModel):
    """
    The authenticated caller of a request.

    Built either from a stored Account or from the configured superadmin
    credentials, in which case ``id`` is None.
    """

    id: int | None = None
    email: str
    name: str = ""
    role: Role
    reporter_code: str | None = Field(default=None, alias="reporterId")

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @classmethod
    def from_account(cls, account: Account) -> Principal:
        return cls(
            id=account.id,
            email=account.email,
            name=account.name,
            role=account.role,
            reporter_code=account.reporter_code,
        )

    @classmethod
    def superadmin(cls, email: str) -> Principal:
        return cls(email=email, name=SUPERADMIN_NAME, role=Role.SUPERADMIN)

    def to_claims(self) -> dict[str, Any]:
        subject = SUPERADMIN_SUBJECT if self.is_superadmin else str(self.id)
        return {
            "sub": subject,
            "email": self.email,
            "role": self.role.value,
            "name": self.name,
        }


class AccountOut(CamelModel):
    """Public view of an account; the password hash is never included."""

    id: int
    name: str
    email: str
    role: Role
    is_approved: bool
    reporter_code: str | None = Field(default=None, alias="reporterId")
    approved_at: datetime | None = None
    avatar: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ReporterApprovalOut(CamelModel):
    id: int
    is_approved: bool
    reporter_code: str | None = Field(default=None, alias="reporterId")
    approved_at: datetime | None = None


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=1, description="Plain text password")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    role: Role
    name: str
    id: int | str


class AuthenticationResult(BaseModel):
    """Result from the authentication backend.

    Attributes:
        success: Whether authentication succeeded.
        user: Authenticated principal or AnonymousUser.
        message: Human-readable status message.
        errors: List of error details for debugging/logging.
        extra: Extra data from the backend (issued token, raw claims).

    """

    success: bool
    user: Principal | AnonymousUser
    message: str = ""
    errors: list[str] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<AuthenticationResult success={self.success} user={self.user!r}>"
