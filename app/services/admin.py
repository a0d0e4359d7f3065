"""Admin: direct credit adjustments."""

from datetime import datetime

from beanie import PydanticObjectId

from app.core.audit import log_event
from app.core.exceptions import (
    AdminNotFoundError,
    InputValidationError,
    NotAuthorizedError,
    TargetNotFoundError,
    UserNotFoundError,
)
from app.core.logging import get_logger
from app.core.store import store_errors
from app.models.user import User
from app.services import ledger

log = get_logger(__name__)


async def adjust_credits(
    admin_user_id: PydanticObjectId,
    target_user_id: PydanticObjectId,
    new_credits: int,
    now: datetime | None = None,
) -> User:
    """Set target's balance to new_credits (absolute). Actor must be an admin."""
    if new_credits < 0:
        raise InputValidationError("credits must be non-negative", details={"credits": new_credits})
    with store_errors("get_admin"):
        admin = await User.get(admin_user_id)
    if not admin:
        raise AdminNotFoundError()
    if not admin.is_admin:
        log.warning("admin_credits_refused", actor_id=str(admin_user_id), target_id=str(target_user_id))
        raise NotAuthorizedError()
    with store_errors("get_target"):
        target = await User.get(target_user_id)
    if not target:
        raise TargetNotFoundError()

    old_credits = target.credits
    try:
        updated = await ledger.set_balance(target_user_id, new_credits, now=now)
    except UserNotFoundError as e:
        # removed between lookup and update
        raise TargetNotFoundError() from e

    log.info(
        "admin_credits_adjusted",
        actor_id=str(admin_user_id),
        target_id=str(target_user_id),
        old_credits=old_credits,
        new_credits=new_credits,
    )
    await log_event(
        str(admin_user_id),
        "admin_credits_adjusted",
        "user",
        str(target_user_id),
        {"old_credits": old_credits, "new_credits": new_credits},
    )
    return updated
