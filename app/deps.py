"""Shared FastAPI dependencies."""

from fastapi import Request

from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import load_session_cookie
from app.core.store import parse_object_id, store_errors
from app.models.user import User

SESSION_COOKIE_NAME = "postboard_session"


async def get_current_user(request: Request) -> User:
    """Dependency: load session from cookie and return User."""
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not cookie:
        raise UnauthorizedError("Not authenticated")
    payload = load_session_cookie(cookie)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")
    user_id = parse_object_id(payload.get("user_id"))
    if not user_id:
        raise UnauthorizedError("Invalid session")
    with store_errors("session_user"):
        user = await User.get(user_id)
    if not user:
        raise UnauthorizedError("User not found")
    return user


async def require_admin(request: Request) -> User:
    """Dependency: require current user to be an admin."""
    user = await get_current_user(request)
    if not user.is_admin:
        raise ForbiddenError("Admin only")
    return user
