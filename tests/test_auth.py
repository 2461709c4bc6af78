"""Sign-in codes, first-user admin and user administration."""
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy import select

from kitflow.config import settings
from kitflow.core.exceptions import EmailDeliveryError, Forbidden, Unauthorized
from kitflow.core.security import hash_sign_in_code, verify_access_token
from kitflow.models.user import LoginCode, UserRole
from kitflow.services.auth_service import AuthService
from kitflow.services.email_service import EmailService


async def login_codes(db, email):
    result = await db.execute(select(LoginCode).where(LoginCode.email == email))
    return list(result.scalars().all())


async def test_request_code_stores_only_hash(db, email_service, sent_emails):
    await AuthService(db, email_service).request_code("  Ada@Example.com ")

    assert len(sent_emails.requests) == 1
    sent = sent_emails.requests[0]
    assert sent["to"] == ["ada@example.com"]
    assert sent["subject"] == f"Sign in to {settings.APP_NAME}"

    code = sent_emails.last_code()
    [stored] = await login_codes(db, "ada@example.com")
    assert stored.code_hash == hash_sign_in_code(code)
    assert code not in stored.code_hash


async def test_new_request_replaces_unused_code(db, email_service, sent_emails):
    service = AuthService(db, email_service)

    await service.request_code("ada@example.com")
    await service.request_code("ada@example.com")

    [stored] = await login_codes(db, "ada@example.com")
    assert stored.code_hash == hash_sign_in_code(sent_emails.last_code())


async def test_first_user_is_admin_then_members(db, email_service, sent_emails):
    service = AuthService(db, email_service)

    await service.request_code("first@example.com")
    token, first = await service.verify_code("first@example.com", sent_emails.last_code())

    await service.request_code("second@example.com")
    _, second = await service.verify_code("second@example.com", sent_emails.last_code())

    assert first.role == UserRole.ADMIN.value
    assert second.role == UserRole.MEMBER.value
    assert first.last_login_at is not None
    assert verify_access_token(token) == str(first.id)


async def test_returning_user_keeps_role(db, email_service, sent_emails, member_user):
    service = AuthService(db, email_service)

    await service.request_code(member_user.email)
    _, user = await service.verify_code(member_user.email, sent_emails.last_code())

    assert user.id == member_user.id
    assert user.role == UserRole.MEMBER.value


async def test_code_is_single_use(db, email_service, sent_emails):
    service = AuthService(db, email_service)
    await service.request_code("ada@example.com")
    code = sent_emails.last_code()

    await service.verify_code("ada@example.com", code)

    with pytest.raises(Unauthorized):
        await service.verify_code("ada@example.com", code)


async def test_wrong_code_counts_attempts(db, email_service, sent_emails, monkeypatch):
    monkeypatch.setattr(settings, "OTP_MAX_ATTEMPTS", 2)
    service = AuthService(db, email_service)
    await service.request_code("ada@example.com")
    code = sent_emails.last_code()
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(2):
        with pytest.raises(Unauthorized, match="Invalid or expired code"):
            await service.verify_code("ada@example.com", wrong)

    [stored] = await login_codes(db, "ada@example.com")
    assert stored.attempts == 2

    # Locked out even with the right code
    with pytest.raises(Unauthorized, match="Too many attempts"):
        await service.verify_code("ada@example.com", code)


async def test_expired_code_rejected(db, email_service, sent_emails):
    service = AuthService(db, email_service)
    await service.request_code("ada@example.com")

    [stored] = await login_codes(db, "ada@example.com")
    stored.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    await db.commit()

    with pytest.raises(Unauthorized, match="Invalid or expired code"):
        await service.verify_code("ada@example.com", sent_emails.last_code())


async def test_deactivated_user_cannot_sign_in(db, email_service, sent_emails, member_user):
    member_user.is_active = False
    await db.commit()
    service = AuthService(db, email_service)

    await service.request_code(member_user.email)
    with pytest.raises(Forbidden):
        await service.verify_code(member_user.email, sent_emails.last_code())


async def test_rejected_email_raises(db, email_service, sent_emails):
    sent_emails.status_code = 500

    with pytest.raises(EmailDeliveryError):
        await AuthService(db, email_service).request_code("ada@example.com")


async def test_unconfigured_email_raises(db):
    service = AuthService(db, EmailService(api_key=""))

    with pytest.raises(EmailDeliveryError, match="not configured"):
        await service.request_code("ada@example.com")


async def test_unreachable_email_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    service = EmailService(api_key="re_test", transport=httpx.MockTransport(handler))

    with pytest.raises(EmailDeliveryError):
        await service.send_email("ada@example.com", "Hello", "<p>Hi</p>")


async def test_admin_cannot_demote_self(db, admin_user, member_user):
    service = AuthService(db)

    with pytest.raises(Forbidden):
        await service.update_role(admin_user, admin_user.id, UserRole.MEMBER)

    promoted = await service.update_role(admin_user, member_user.id, UserRole.ADMIN)
    assert promoted.role == UserRole.ADMIN.value


async def test_admin_cannot_delete_self(db, admin_user, member_user):
    service = AuthService(db)

    with pytest.raises(Forbidden):
        await service.delete_user(admin_user, admin_user.id)

    await service.delete_user(admin_user, member_user.id)
    assert [u.email for u in await service.list_users()] == [admin_user.email]
