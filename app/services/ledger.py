"""Account ledger: the only place user balances are read or written.

Debits are a single conditional update on the user document, so two
concurrent spends for the same user cannot both pass the balance check.
"""

from datetime import datetime

from beanie import PydanticObjectId, UpdateResponse

from app.core.clock import as_naive_utc
from app.core.exceptions import InputValidationError, InsufficientCreditsError, UserNotFoundError
from app.core.logging import get_logger
from app.core.store import store_errors
from app.models.user import User

log = get_logger(__name__)


async def get_account(user_id: PydanticObjectId) -> User:
    with store_errors("get_user"):
        user = await User.get(user_id)
    if not user:
        raise UserNotFoundError()
    return user


async def get_balance(user_id: PydanticObjectId) -> int:
    user = await get_account(user_id)
    return user.credits


async def debit(user_id: PydanticObjectId, amount: int, now: datetime | None = None) -> int:
    """Atomically subtract amount when the balance covers it. Returns the balance after."""
    if amount <= 0:
        raise InputValidationError("amount must be positive", details={"amount": amount})
    now = as_naive_utc(now)
    with store_errors("debit"):
        updated = await User.find_one(User.id == user_id, User.credits >= amount).update(
            {"$inc": {"credits": -amount}, "$set": {"updated_at": now}},
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
    if updated is None:
        # Nothing matched: either the user is gone or the balance is short.
        user = await get_account(user_id)
        raise InsufficientCreditsError(required=amount, available=user.credits)
    log.info("credits_debited", user_id=str(user_id), amount=amount, balance_after=updated.credits)
    return updated.credits


async def credit(user_id: PydanticObjectId, amount: int, now: datetime | None = None) -> int:
    """Add amount back to a balance (refund of a debit whose post never got stored)."""
    if amount <= 0:
        raise InputValidationError("amount must be positive", details={"amount": amount})
    now = as_naive_utc(now)
    with store_errors("credit"):
        updated = await User.find_one(User.id == user_id).update(
            {"$inc": {"credits": amount}, "$set": {"updated_at": now}},
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
    if updated is None:
        raise UserNotFoundError()
    log.info("credits_refunded", user_id=str(user_id), amount=amount, balance_after=updated.credits)
    return updated.credits


async def set_balance(user_id: PydanticObjectId, new_value: int, now: datetime | None = None) -> User:
    """Absolute set, for the admin path only."""
    if new_value < 0:
        raise InputValidationError("credits must be non-negative", details={"credits": new_value})
    now = as_naive_utc(now)
    with store_errors("set_balance"):
        updated = await User.find_one(User.id == user_id).update(
            {"$set": {"credits": new_value, "updated_at": now}},
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
    if updated is None:
        raise UserNotFoundError()
    return updated
