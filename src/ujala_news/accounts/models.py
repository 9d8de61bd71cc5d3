from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from ujala_news.authorization.permissions import Role
from ujala_news.db.models import Model, TimestampMixin

from .hasher import hash_password, verify_password


class Account(Model, TimestampMixin):
    """
    A stored principal: an admin or a reporter.

    The superadmin is a configured credential pair and never has a row here.
    """

    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=Role.ADMIN,
        nullable=False,
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    reporter_code: Mapped[str | None] = mapped_column(
        String(16), unique=True, index=True, nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def is_reporter(self) -> bool:
        return self.role == Role.REPORTER

    @property
    def can_authenticate(self) -> bool:
        """Reporters must be approved before they may log in."""
        return not self.is_reporter or self.is_approved

    def check_password(self, raw_password: str) -> bool:
        """Verify password against hash using Argon2."""
        return verify_password(self.password_hash, raw_password)

    def set_password(self, raw_password: str) -> None:
        self.password_hash = hash_password(raw_password)

    def __str__(self) -> str:
        return self.email

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email='{self.email}', role='{self.role}')>"
