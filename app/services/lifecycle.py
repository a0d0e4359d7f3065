"""Post lifecycle: spend-and-create, visibility, dashboard, expiry sweep, facets.

Every time-sensitive call takes an explicit `now`; None means the current
time and aware values are converted to naive UTC.
"""

import asyncio
from datetime import datetime
from typing import Any

from beanie import PydanticObjectId

from app.core.clock import as_naive_utc
from app.core.config import get_settings
from app.core.exceptions import InsufficientCreditsError, StoreUnavailableError
from app.core.logging import get_logger
from app.core.store import parse_object_id
from app.models.post import Post, PostCategory, PostDraft
from app.services import ledger
from app.services import posts as post_store

log = get_logger(__name__)


async def create_post(user_id: PydanticObjectId, draft: PostDraft, now: datetime | None = None) -> Post:
    """
    Debit draft.credits_cost from the user and store the post.
    If storing the post does not complete (error or cancellation), the debit is
    refunded, so no balance is ever left charged without a post.
    """
    now = as_naive_utc(now)
    available = await ledger.get_balance(user_id)
    if available < draft.credits_cost:
        raise InsufficientCreditsError(required=draft.credits_cost, available=available)

    balance_after = await ledger.debit(user_id, draft.credits_cost, now=now)
    post = None
    try:
        post = await post_store.insert(user_id, draft, now=now)
    finally:
        if post is None:
            log.warning("post_insert_failed", user_id=str(user_id), credits_cost=draft.credits_cost)
            await asyncio.shield(ledger.credit(user_id, draft.credits_cost, now=now))
            log.info("post_create_refunded", user_id=str(user_id), credits_cost=draft.credits_cost)

    log.info(
        "post_created",
        user_id=str(user_id),
        post_id=str(post.id),
        credits_cost=post.credits_cost,
        balance_after=balance_after,
        expires_at=post.expires_at.isoformat(),
    )
    return post


async def get_posts(
    category: PostCategory | None = None,
    country: str | None = None,
    city: str | None = None,
    limit: int | None = None,
    offset: int = 0,
    now: datetime | None = None,
) -> list[Post]:
    if limit is None:
        limit = get_settings().posts_default_limit
    return await post_store.query(
        as_naive_utc(now),
        category=category,
        country=country,
        city=city,
        limit=limit,
        offset=offset,
    )


async def get_user_posts(
    user_id: PydanticObjectId,
    include_expired: bool = False,
    now: datetime | None = None,
) -> list[Post]:
    return await post_store.query_by_user(user_id, as_naive_utc(now), include_expired=include_expired)


async def get_post_by_id(post_id: str | PydanticObjectId, now: datetime | None = None) -> Post | None:
    """Visible post or None (unknown id, malformed id, or expired)."""
    oid = parse_object_id(post_id)
    if oid is None:
        return None
    post = await post_store.get_by_id(oid)
    if post is None or not post.is_active(as_naive_utc(now)):
        return None
    return post


async def get_user_dashboard(user_id: PydanticObjectId, now: datetime | None = None) -> dict[str, Any]:
    now = as_naive_utc(now)
    user = await ledger.get_account(user_id)
    active, expired = await post_store.count_by_user(user_id, now)
    spent = await post_store.credits_spent_by_user(user_id)
    recent = await post_store.recent_by_user(user_id, limit=get_settings().dashboard_recent_limit)
    return {
        "user": user,
        "active_posts_count": active,
        "expired_posts_count": expired,
        "total_credits_spent": spent,
        "recent_posts": recent,
    }


async def sweep_expired(now: datetime | None = None) -> int:
    """Delete posts whose expiry has passed. Balances are never refunded."""
    now = as_naive_utc(now)
    deleted = await post_store.delete_expired(now)
    log.info("expired_posts_swept", deleted=deleted, now=now.isoformat())
    return deleted


async def get_facets() -> dict[str, Any]:
    """Facets for browsing; read-only, so a store outage degrades to the empty shape."""
    try:
        return await post_store.aggregate_facets()
    except StoreUnavailableError:
        log.warning("facets_degraded")
        return post_store.empty_facets()
