from typing import Any

from fastapi import APIRouter, Depends

from app.core.exceptions import UserNotFoundError
from app.core.store import parse_object_id
from app.deps import get_current_user
from app.models.user import User
from app.routers.serializers import post_out, user_out
from app.services import lifecycle

router = APIRouter()


def _dashboard_out(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "user": user_out(data["user"]),
        "active_posts_count": data["active_posts_count"],
        "expired_posts_count": data["expired_posts_count"],
        "total_credits_spent": data["total_credits_spent"],
        "recent_posts": [post_out(p) for p in data["recent_posts"]],
    }


@router.get("/me/dashboard")
async def my_dashboard(user: User = Depends(get_current_user)):
    return _dashboard_out(await lifecycle.get_user_dashboard(user.id))


@router.get("/{user_id}/dashboard")
async def user_dashboard(user_id: str, user: User = Depends(get_current_user)):
    oid = parse_object_id(user_id)
    if oid is None:
        raise UserNotFoundError()
    return _dashboard_out(await lifecycle.get_user_dashboard(oid))


@router.get("/{user_id}/posts")
async def user_posts(user_id: str, include_expired: bool = False):
    """Posts of one user, newest first; expired ones only when asked."""
    oid = parse_object_id(user_id)
    if oid is None:
        return {"posts": []}
    items = await lifecycle.get_user_posts(oid, include_expired=include_expired)
    return {"posts": [post_out(p) for p in items]}
