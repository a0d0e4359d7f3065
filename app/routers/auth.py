from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr

from app.core.config import get_settings
from app.core.security import create_session_cookie
from app.deps import SESSION_COOKIE_NAME, get_current_user
from app.models.user import User
from app.routers.serializers import user_out
from app.services import users as user_service

router = APIRouter()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


def _set_session(response: Response, user: User) -> None:
    max_age = get_settings().session_max_age_seconds
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_cookie(user_service.session_payload_for_user(user)),
        max_age=max_age,
        httponly=True,
        secure=False,  # set True in prod with HTTPS
        samesite="lax",
        path="/",
    )


@router.post("/register", status_code=201)
async def auth_register(body: RegisterRequest, response: Response):
    """Create an account with the signup credit grant; sets the session cookie."""
    user = await user_service.register_user(body.email, body.password)
    _set_session(response, user)
    return {"user": user_out(user)}


@router.post("/login")
async def auth_login(body: LoginRequest, response: Response):
    user = await user_service.authenticate_user(body.email, body.password)
    _set_session(response, user)
    return {"user": user_out(user)}


@router.post("/logout")
async def auth_logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"status": "ok"}


@router.get("/me")
async def auth_me(user: User = Depends(get_current_user)):
    """Return current user. Requires session cookie."""
    return user_out(user)
