"""
Account registration and reporter moderation.

Reporter codes are allocated by one policy everywhere: up to
``REPORTER_CODE_MAX_ATTEMPTS`` candidates, each checked against the store.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.authorization.permissions import Role
from ujala_news.core.config import UjalaSettings
from ujala_news.core.exceptions import NotAReporterError, NotFoundError, ValidationError
from ujala_news.db.exceptions import IntegrityViolationError
from ujala_news.db.models import utcnow
from ujala_news.news.identifiers import reporter_code

from .models import Account
from .schemas import RegisterRequest

logger = logging.getLogger(__name__)


async def allocate_reporter_code(db: AsyncSession, settings: UjalaSettings) -> str:
    """
    Return a reporter code not yet used by any account.

    Raises:
        ValidationError: If every attempt collided.
    """
    attempts = max(1, settings.REPORTER_CODE_MAX_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        candidate = reporter_code()
        if not await Account.objects.filter(reporter_code=candidate).exists(db):
            return candidate
        logger.info("Reporter code %s taken (attempt %d/%d)", candidate, attempt, attempts)
    msg = "Could not allocate a unique reporter id, please retry"
    raise ValidationError(msg)


async def _register(
    db: AsyncSession,
    payload: RegisterRequest,
    *,
    role: Role,
    is_approved: bool,
    code: str | None = None,
) -> Account:
    email = str(payload.email).strip().lower()
    if await Account.objects.filter(email__iexact=email).exists(db):
        raise ValidationError("User already exists")

    account = Account(
        name=payload.name.strip(),
        email=email,
        role=role,
        is_approved=is_approved,
        reporter_code=code,
    )
    account.set_password(payload.password)
    try:
        return await Account.objects.save(db, account)
    except IntegrityViolationError as e:
        # Lost a race with a concurrent registration.
        raise ValidationError("User already exists") from e


async def register_admin(db: AsyncSession, payload: RegisterRequest) -> Account:
    account = await _register(db, payload, role=Role.ADMIN, is_approved=True)
    logger.info("Registered admin account %s", account.id)
    return account


async def register_reporter(
    db: AsyncSession, payload: RegisterRequest, settings: UjalaSettings
) -> Account:
    """Register a reporter; the account stays pending until a superadmin approves."""
    code = await allocate_reporter_code(db, settings)
    account = await _register(
        db, payload, role=Role.REPORTER, is_approved=False, code=code
    )
    logger.info("Registered reporter account %s (%s), pending approval", account.id, code)
    return account


async def _get_reporter(db: AsyncSession, account_id: int) -> Account:
    account = await Account.objects.get_or_none(db, id=account_id)
    if account is None:
        raise NotFoundError("Reporter not found")
    if not account.is_reporter:
        raise NotAReporterError()
    return account


async def approve_reporter(
    db: AsyncSession, account_id: int, settings: UjalaSettings
) -> Account:
    """
    Approve a reporter account.

    Re-approving is harmless: ``approved_at`` keeps its first value and an
    existing reporter code is never replaced.

    Raises:
        NotFoundError: No account with that id.
        NotAReporterError: The account is not a reporter; nothing is changed.
    """
    account = await _get_reporter(db, account_id)
    account.is_approved = True
    if account.approved_at is None:
        account.approved_at = utcnow()
    if not account.reporter_code:
        account.reporter_code = await allocate_reporter_code(db, settings)
    account = await Account.objects.save(db, account)
    logger.info("Reporter %s approved", account.id)
    return account


async def delete_reporter(db: AsyncSession, account_id: int) -> None:
    """
    Hard-delete a reporter account. Their articles keep the dangling id.

    Raises:
        NotFoundError: No account with that id.
        NotAReporterError: The account is not a reporter; nothing is changed.
    """
    account = await _get_reporter(db, account_id)
    await Account.objects.delete(db, account)
    logger.info("Reporter %s deleted", account_id)


async def list_reporters(db: AsyncSession) -> Sequence[Account]:
    return await (
        Account.objects.filter(role=Role.REPORTER).order_by("-created_at").fetch(db)
    )
