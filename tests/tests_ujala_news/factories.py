"""Helpers for building rows and credentials in tests."""

from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.accounts.models import Account
from ujala_news.accounts.schemas import Principal
from ujala_news.accounts.tokens import create_access_token
from ujala_news.authorization.permissions import Role
from ujala_news.core.config import UjalaSettings
from ujala_news.news.models import NewsArticle

SUPERADMIN_EMAIL = "chief@moradabadujala.in"
SUPERADMIN_PASSWORD = "editor-in-chief"
PASSWORD = "password123"


async def make_account(
    db: AsyncSession,
    *,
    email: str,
    role: Role = Role.ADMIN,
    is_approved: bool = True,
    name: str = "Test User",
    reporter_code: str | None = None,
) -> Account:
    account = Account(
        name=name,
        email=email,
        role=role,
        is_approved=is_approved,
        reporter_code=reporter_code,
    )
    account.set_password(PASSWORD)
    return await Account.objects.save(db, account)


async def make_article(db: AsyncSession, title: str, **fields) -> NewsArticle:
    fields.setdefault("description", f"{title} description")
    fields.setdefault("content", f"{title} content")
    return await NewsArticle.objects.create(db, title=title, **fields)


def bearer(principal: Principal, settings: UjalaSettings) -> dict[str, str]:
    token = create_access_token(principal.to_claims(), settings)
    return {"Authorization": f"Bearer {token}"}
