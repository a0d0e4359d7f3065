from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.core.exceptions import TargetNotFoundError
from app.core.store import parse_object_id
from app.deps import get_current_user, require_admin
from app.models.user import User
from app.routers.serializers import user_out
from app.services import admin as admin_service
from app.services import lifecycle

router = APIRouter()


class CreditsUpdate(BaseModel):
    credits: int = Field(ge=0)


@router.put("/users/{user_id}/credits")
async def admin_set_credits(user_id: str, body: CreditsUpdate, user: User = Depends(get_current_user)):
    """Admin: set a user's balance to an absolute value. Non-admins get NOT_AUTHORIZED."""
    target_id = parse_object_id(user_id)
    if target_id is None:
        raise TargetNotFoundError()
    updated = await admin_service.adjust_credits(user.id, target_id, body.credits)
    return user_out(updated)


@router.post("/posts/sweep")
async def admin_sweep_posts(user: User = Depends(require_admin)):
    """Admin: delete expired posts now instead of waiting for the cron."""
    deleted = await lifecycle.sweep_expired()
    return {"deleted": deleted}
