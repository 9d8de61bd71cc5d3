import re
from unittest.mock import patch

import pytest

from ujala_news.accounts import service
from ujala_news.accounts.models import Account
from ujala_news.accounts.schemas import RegisterRequest
from ujala_news.authorization.permissions import Role
from ujala_news.core.exceptions import NotAReporterError, NotFoundError, ValidationError

from .factories import make_account

pytestmark = pytest.mark.asyncio


def register_payload(email="sunita@moradabadujala.in", name="Sunita Sharma"):
    return RegisterRequest(name=name, email=email, password="s3cret-pass")


class TestRegistration:
    async def test_register_admin(self, db_session):
        account = await service.register_admin(db_session, register_payload())

        assert account.role == Role.ADMIN
        assert account.is_approved is True
        assert account.reporter_code is None
        assert account.check_password("s3cret-pass")
        assert account.password_hash != "s3cret-pass"

    async def test_register_reporter_is_pending_with_code(self, db_session, settings):
        account = await service.register_reporter(db_session, register_payload(), settings)

        assert account.role == Role.REPORTER
        assert account.is_approved is False
        assert account.can_authenticate is False
        assert re.fullmatch(r"R\d{7}", account.reporter_code)

    async def test_email_is_normalized(self, db_session):
        account = await service.register_admin(
            db_session, register_payload(email="Sunita@MoradabadUjala.in")
        )
        assert account.email == "sunita@moradabadujala.in"

    async def test_duplicate_email_rejected(self, db_session, settings):
        await service.register_admin(db_session, register_payload())
        with pytest.raises(ValidationError, match="User already exists"):
            await service.register_reporter(
                db_session,
                register_payload(email="SUNITA@moradabadujala.in"),
                settings,
            )


class TestReporterCodeAllocation:
    async def test_retries_on_collision(self, db_session, settings):
        await make_account(
            db_session,
            email="taken@moradabadujala.in",
            role=Role.REPORTER,
            reporter_code="R1111111",
        )
        with patch.object(
            service, "reporter_code", side_effect=["R1111111", "R2222222"]
        ):
            code = await service.allocate_reporter_code(db_session, settings)
        assert code == "R2222222"

    async def test_exhaustion_raises(self, db_session, settings):
        settings.REPORTER_CODE_MAX_ATTEMPTS = 3
        await make_account(
            db_session,
            email="taken@moradabadujala.in",
            role=Role.REPORTER,
            reporter_code="R1111111",
        )
        with (
            patch.object(service, "reporter_code", return_value="R1111111") as gen,
            pytest.raises(ValidationError, match="unique reporter id"),
        ):
            await service.allocate_reporter_code(db_session, settings)
        assert gen.call_count == 3


class TestApproveReporter:
    async def test_approves_pending_reporter(self, db_session, pending_reporter, settings):
        account = await service.approve_reporter(db_session, pending_reporter.id, settings)

        assert account.is_approved is True
        assert account.approved_at is not None
        assert account.reporter_code == "R7654321"
        assert account.can_authenticate is True

    async def test_second_approval_keeps_first_timestamp(
        self, db_session, pending_reporter, settings
    ):
        first = await service.approve_reporter(db_session, pending_reporter.id, settings)
        approved_at = first.approved_at

        second = await service.approve_reporter(db_session, pending_reporter.id, settings)

        assert second.approved_at == approved_at
        assert second.reporter_code == "R7654321"

    async def test_allocates_missing_code(self, db_session, settings):
        legacy = await make_account(
            db_session,
            email="legacy@moradabadujala.in",
            role=Role.REPORTER,
            is_approved=False,
        )
        account = await service.approve_reporter(db_session, legacy.id, settings)
        assert re.fullmatch(r"R\d{7}", account.reporter_code)

    async def test_rejects_non_reporter(self, db_session, admin_account, settings):
        with pytest.raises(NotAReporterError):
            await service.approve_reporter(db_session, admin_account.id, settings)

        unchanged = await Account.objects.get_by_pk(db_session, admin_account.id)
        assert unchanged.approved_at is None
        assert unchanged.reporter_code is None

    async def test_missing_account(self, db_session, settings):
        with pytest.raises(NotFoundError, match="Reporter not found"):
            await service.approve_reporter(db_session, 999, settings)


class TestDeleteAndList:
    async def test_delete_reporter(self, db_session, reporter_account):
        await service.delete_reporter(db_session, reporter_account.id)
        assert await Account.objects.get_or_none(db_session, id=reporter_account.id) is None

    async def test_delete_rejects_admin(self, db_session, admin_account):
        with pytest.raises(NotAReporterError):
            await service.delete_reporter(db_session, admin_account.id)
        assert await Account.objects.get_or_none(db_session, id=admin_account.id)

    async def test_list_only_reporters(
        self, db_session, admin_account, reporter_account, pending_reporter
    ):
        reporters = await service.list_reporters(db_session)
        assert {a.id for a in reporters} == {reporter_account.id, pending_reporter.id}
        assert admin_account.id not in {a.id for a in reporters}
