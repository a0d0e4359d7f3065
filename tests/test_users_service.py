"""Registration and login."""

import pytest

from app.core.exceptions import DuplicateEmailError, InputValidationError, InvalidCredentialsError
from app.models.audit_log import AuditLog
from app.services import users as user_service

pytestmark = pytest.mark.asyncio


async def test_register_grants_signup_credits(db):
    user = await user_service.register_user("Alice@Example.com ", "secret123")
    assert user.email == "alice@example.com"
    assert user.credits == 10
    assert user.is_admin is False
    assert user.password_hash != "secret123"
    assert await AuditLog.find(AuditLog.event_type == "user_registered").count() == 1


async def test_register_duplicate_email(db):
    await user_service.register_user("alice@example.com", "secret123")
    with pytest.raises(DuplicateEmailError):
        await user_service.register_user("ALICE@example.com", "another-pass")


async def test_register_short_password(db):
    with pytest.raises(InputValidationError):
        await user_service.register_user("alice@example.com", "123")


async def test_login(db):
    registered = await user_service.register_user("alice@example.com", "secret123")
    user = await user_service.authenticate_user("alice@example.com", "secret123")
    assert user.id == registered.id


async def test_login_wrong_password(db):
    await user_service.register_user("alice@example.com", "secret123")
    with pytest.raises(InvalidCredentialsError):
        await user_service.authenticate_user("alice@example.com", "wrong-pass")


async def test_login_unknown_email(db):
    with pytest.raises(InvalidCredentialsError):
        await user_service.authenticate_user("nobody@example.com", "secret123")
