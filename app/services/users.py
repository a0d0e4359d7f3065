from pymongo.errors import DuplicateKeyError

from app.core.audit import log_event
from app.core.config import get_settings
from app.core.exceptions import DuplicateEmailError, InputValidationError, InvalidCredentialsError
from app.core.logging import get_logger
from app.core.security import hash_password, verify_password
from app.core.store import store_errors
from app.models.user import User

log = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def register_user(email: str, password: str) -> User:
    email = normalize_email(email)
    if not email or "@" not in email:
        raise InputValidationError("A valid email is required")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise InputValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    with store_errors("register_user"):
        existing = await User.find_one(User.email == email)
        if existing:
            raise DuplicateEmailError()
        user = User(
            email=email,
            password_hash=hash_password(password),
            credits=get_settings().signup_credits,
        )
        try:
            await user.insert()
        except DuplicateKeyError as e:
            raise DuplicateEmailError() from e

    log.info("user_registered", user_id=str(user.id), email=user.email, credits=user.credits)
    await log_event(str(user.id), "user_registered", "user", str(user.id), {"email": user.email})
    return user


async def authenticate_user(email: str, password: str) -> User:
    """Return the user whose credentials match, else InvalidCredentialsError."""
    with store_errors("login_user"):
        user = await User.find_one(User.email == normalize_email(email))
    if not user or not verify_password(password or "", user.password_hash):
        log.info("user_login_failed", email=normalize_email(email))
        raise InvalidCredentialsError()
    log.info("user_login", user_id=str(user.id), email=user.email)
    return user


def session_payload_for_user(user: User) -> dict:
    return {"user_id": str(user.id)}
