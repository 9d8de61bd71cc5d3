import hmac
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.authorization.permissions import Role
from ujala_news.core.config import UjalaSettings
from ujala_news.core.exceptions import (
    AuthenticationError,
    ReporterPendingApprovalError,
)

from .models import Account
from .schemas import SUPERADMIN_SUBJECT, AnonymousUser, AuthenticationResult, Principal
from .tokens import create_access_token, decode_access_token

logger = logging.getLogger(__name__)


def _constant_time_equals(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class TokenAuthenticationBackend:
    """
    Issues and verifies bearer tokens for accounts and the superadmin.

    Stored accounts are reloaded on every request so deleted accounts and
    reporters that are not approved lose access at once.
    """

    def __init__(self, settings: UjalaSettings):
        self.settings = settings

    async def authenticate(self, db: AsyncSession, token: str) -> AuthenticationResult:
        """Verify a bearer token.

        Returns:
            AuthenticationResult: Always returns a result object, never None.
        """
        if not token:
            return AuthenticationResult(
                success=False,
                user=AnonymousUser(),
                message="Missing token",
            )
        try:
            claims = decode_access_token(token, self.settings)
        except AuthenticationError as e:
            return AuthenticationResult(
                success=False,
                user=AnonymousUser(),
                message=e.message,
                errors=[e.message],
            )

        if claims["sub"] == SUPERADMIN_SUBJECT:
            if claims.get("role") != Role.SUPERADMIN.value:
                return AuthenticationResult(
                    success=False,
                    user=AnonymousUser(),
                    message="Invalid token",
                    errors=["Superadmin subject with a different role"],
                )
            principal = Principal.superadmin(claims.get("email") or "")
            return AuthenticationResult(
                success=True,
                user=principal,
                message="Authenticated",
                extra={"claims": claims},
            )

        try:
            account_id = int(claims["sub"])
        except (TypeError, ValueError):
            return AuthenticationResult(
                success=False,
                user=AnonymousUser(),
                message="Invalid token",
                errors=["Subject is not an account id"],
            )

        account = await db.get(Account, account_id)
        if account is None:
            return AuthenticationResult(
                success=False,
                user=AnonymousUser(),
                message="Account not found",
                errors=[f"Account {account_id} no longer exists"],
            )
        if not account.can_authenticate:
            return AuthenticationResult(
                success=False,
                user=AnonymousUser(),
                message=ReporterPendingApprovalError.default_message,
            )

        return AuthenticationResult(
            success=True,
            user=Principal.from_account(account),
            message="Authenticated",
            extra={"claims": claims},
        )

    async def login(
        self, db: AsyncSession, *, email: str, password: str
    ) -> AuthenticationResult:
        """
        Check credentials of a stored account and issue a token.

        Raises:
            AuthenticationError: Unknown email or wrong password.
            ReporterPendingApprovalError: Reporter not yet approved.
        """
        account = await Account.objects.get_or_none(db, email=email.strip().lower())
        if account is None or not account.check_password(password):
            raise AuthenticationError()
        if not account.can_authenticate:
            raise ReporterPendingApprovalError()

        principal = Principal.from_account(account)
        token = create_access_token(principal.to_claims(), self.settings)
        logger.info("Account %s logged in as %s", account.id, account.role)
        return AuthenticationResult(
            success=True,
            user=principal,
            message="Login Successful",
            extra={"token": token},
        )

    async def superadmin_login(self, *, email: str, password: str) -> AuthenticationResult:
        """
        Check the configured superadmin credential pair and issue a token.

        Raises:
            AuthenticationError: Credentials missing from configuration or
                not matching.
        """
        if not self.settings.superadmin_configured:
            logger.warning("Superadmin login attempted but no credentials are configured")
            raise AuthenticationError("Invalid superadmin credentials")

        email_ok = _constant_time_equals(email, self.settings.SUPERADMIN_EMAIL)
        password_ok = _constant_time_equals(password, self.settings.SUPERADMIN_PASSWORD)
        if not (email_ok and password_ok):
            raise AuthenticationError("Invalid superadmin credentials")

        principal = Principal.superadmin(email)
        token = create_access_token(principal.to_claims(), self.settings)
        logger.info("Superadmin logged in")
        return AuthenticationResult(
            success=True,
            user=principal,
            message="Login Successful",
            extra={"token": token},
        )
