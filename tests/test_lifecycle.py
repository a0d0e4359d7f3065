"""Post lifecycle: spend-and-create, visibility, dashboard, sweep and facets."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from beanie import PydanticObjectId
from pydantic import ValidationError

from app.core.exceptions import InsufficientCreditsError, StoreUnavailableError, UserNotFoundError
from app.models.post import Post
from app.models.user import User
from app.services import lifecycle
from app.services import posts as post_store

pytestmark = pytest.mark.asyncio

T0 = datetime(2026, 3, 1, 12, 0, 0)


async def test_create_post_debits_and_stores(make_user, make_draft):
    user = await make_user(credits=10)
    post = await lifecycle.create_post(user.id, make_draft(credits_cost=4), now=T0)

    assert post.user_id == user.id
    assert post.expires_at == T0 + timedelta(hours=24)
    assert (await User.get(user.id)).credits == 6
    assert await Post.find_all().count() == 1


async def test_create_post_unknown_user(db, make_draft):
    with pytest.raises(UserNotFoundError):
        await lifecycle.create_post(PydanticObjectId(), make_draft())
    assert await Post.find_all().count() == 0


async def test_spend_all_then_insufficient(make_user, make_draft):
    user = await make_user(credits=10)
    await lifecycle.create_post(user.id, make_draft(credits_cost=10), now=T0)
    assert (await User.get(user.id)).credits == 0

    with pytest.raises(InsufficientCreditsError):
        await lifecycle.create_post(user.id, make_draft(credits_cost=1), now=T0)
    assert (await User.get(user.id)).credits == 0
    assert await Post.find_all().count() == 1


async def test_insert_failure_refunds_debit(make_user, make_draft, monkeypatch):
    user = await make_user(credits=10)

    async def failing_insert(*args, **kwargs):
        raise StoreUnavailableError()

    monkeypatch.setattr(post_store, "insert", failing_insert)
    with pytest.raises(StoreUnavailableError):
        await lifecycle.create_post(user.id, make_draft(credits_cost=5), now=T0)

    assert (await User.get(user.id)).credits == 10
    assert await Post.find_all().count() == 0


async def test_cancelled_insert_refunds_debit(make_user, make_draft, monkeypatch):
    user = await make_user(credits=10)

    async def slow_insert(*args, **kwargs):
        await asyncio.sleep(5)

    monkeypatch.setattr(post_store, "insert", slow_insert)
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(lifecycle.create_post(user.id, make_draft(credits_cost=4), now=T0), 0.2)

    assert (await User.get(user.id)).credits == 10
    assert await Post.find_all().count() == 0


async def test_concurrent_creates_never_overdraw(make_user, make_draft):
    user = await make_user(credits=10)
    results = await asyncio.gather(
        *(lifecycle.create_post(user.id, make_draft(credits_cost=4), now=T0) for _ in range(3)),
        return_exceptions=True,
    )
    created = [r for r in results if isinstance(r, Post)]
    refused = [r for r in results if isinstance(r, InsufficientCreditsError)]
    assert len(created) == 2
    assert len(refused) == 1
    assert (await User.get(user.id)).credits == 2
    assert await Post.find_all().count() == 2


async def test_draft_validation_happens_before_any_store_access(make_draft):
    with pytest.raises(ValidationError):
        make_draft(title="")
    with pytest.raises(ValidationError):
        make_draft(title="x" * 201)
    with pytest.raises(ValidationError):
        make_draft(description="d" * 2001)
    with pytest.raises(ValidationError):
        make_draft(image_url="not a url")
    with pytest.raises(ValidationError):
        make_draft(category="gardening")
    with pytest.raises(ValidationError):
        make_draft(country="   ")
    with pytest.raises(ValidationError):
        make_draft(credits_cost=0)


async def test_post_visible_then_expired_then_swept(make_user, make_draft):
    user = await make_user()
    post = await lifecycle.create_post(user.id, make_draft(), now=T0)

    at_23h = T0 + timedelta(hours=23)
    assert [p.id for p in await lifecycle.get_posts(now=at_23h)] == [post.id]
    assert (await lifecycle.get_post_by_id(post.id, now=at_23h)).id == post.id

    at_25h = T0 + timedelta(hours=25)
    assert await lifecycle.get_posts(now=at_25h) == []
    assert await lifecycle.get_post_by_id(post.id, now=at_25h) is None

    before = await Post.find_all().count()
    assert await lifecycle.sweep_expired(now=at_25h) == 1
    assert await Post.find_all().count() == before - 1
    assert await lifecycle.get_post_by_id(post.id, now=at_25h) is None
    assert await lifecycle.sweep_expired(now=at_25h) == 0


async def test_sweep_does_not_refund(make_user, make_draft):
    user = await make_user(credits=10)
    await lifecycle.create_post(user.id, make_draft(credits_cost=3), now=T0)
    await lifecycle.sweep_expired(now=T0 + timedelta(days=2))
    assert (await User.get(user.id)).credits == 7


async def test_sweep_keeps_active_posts(make_user, make_draft):
    user = await make_user()
    await lifecycle.create_post(user.id, make_draft(), now=T0)
    assert await lifecycle.sweep_expired(now=T0 + timedelta(hours=23, minutes=59)) == 0
    assert await Post.find_all().count() == 1


async def test_get_post_by_id_malformed_or_unknown(db):
    assert await lifecycle.get_post_by_id("not-an-object-id") is None
    assert await lifecycle.get_post_by_id(str(PydanticObjectId())) is None


async def test_get_posts_default_limit(make_user, make_draft):
    user = await make_user(credits=100)
    for i in range(25):
        await lifecycle.create_post(user.id, make_draft(title=f"p{i}"), now=T0 + timedelta(seconds=i))
    assert len(await lifecycle.get_posts(now=T0 + timedelta(hours=1))) == 20


async def test_get_user_posts(make_user, make_draft):
    user = await make_user()
    old = await lifecycle.create_post(user.id, make_draft(title="old"), now=T0 - timedelta(hours=30))
    new = await lifecycle.create_post(user.id, make_draft(title="new"), now=T0)

    assert [p.id for p in await lifecycle.get_user_posts(user.id, now=T0)] == [new.id]
    assert [p.id for p in await lifecycle.get_user_posts(user.id, include_expired=True, now=T0)] == [new.id, old.id]


async def test_dashboard(make_user, make_draft):
    user = await make_user(credits=100)
    for i in range(12):
        # six expired (created 30h ago and earlier), six active
        created = T0 - timedelta(hours=30 + i) if i < 6 else T0 - timedelta(minutes=i)
        await lifecycle.create_post(user.id, make_draft(title=f"p{i}", credits_cost=2), now=created)

    dash = await lifecycle.get_user_dashboard(user.id, now=T0)
    assert dash["user"].id == user.id
    assert dash["user"].credits == 76
    assert dash["active_posts_count"] == 6
    assert dash["expired_posts_count"] == 6
    assert dash["active_posts_count"] + dash["expired_posts_count"] == await Post.find(Post.user_id == user.id).count()
    assert dash["total_credits_spent"] == 24
    recent = dash["recent_posts"]
    assert len(recent) == 10
    assert [p.created_at for p in recent] == sorted((p.created_at for p in recent), reverse=True)
    assert recent[0].title == "p6"


async def test_dashboard_spend_ignores_admin_set_balance(make_user, make_draft):
    from app.services import ledger

    user = await make_user(credits=10)
    await lifecycle.create_post(user.id, make_draft(credits_cost=4), now=T0)
    await ledger.set_balance(user.id, 500)
    dash = await lifecycle.get_user_dashboard(user.id, now=T0)
    assert dash["total_credits_spent"] == 4
    assert dash["user"].credits == 500


async def test_dashboard_unknown_user(db):
    with pytest.raises(UserNotFoundError):
        await lifecycle.get_user_dashboard(PydanticObjectId())


async def test_facets_on_empty_store(db):
    facets = await lifecycle.get_facets()
    assert len(facets["categories"]) == 10
    assert facets["countries"] == []
    assert facets["cities"] == []
    assert facets["locations"] == []
    assert facets["stats"]["total_posts"] == 0


async def test_facets_degrade_on_store_failure(make_user, make_draft, monkeypatch):
    user = await make_user()
    await lifecycle.create_post(user.id, make_draft(), now=T0)

    async def broken():
        raise StoreUnavailableError()

    monkeypatch.setattr(post_store, "aggregate_facets", broken)
    facets = await lifecycle.get_facets()
    assert len(facets["categories"]) == 10
    assert facets["countries"] == []
    assert facets["stats"] == {"total_posts": 0, "total_countries": 0, "total_cities": 0}


async def test_expiry_boundary_is_strict_for_single_and_user_reads(make_user, make_draft):
    user = await make_user()
    post = await lifecycle.create_post(user.id, make_draft(), now=T0)
    just_before = T0 + timedelta(hours=24) - timedelta(seconds=1)
    at_expiry = T0 + timedelta(hours=24)

    assert (await lifecycle.get_post_by_id(post.id, now=just_before)).id == post.id
    assert await lifecycle.get_post_by_id(post.id, now=at_expiry) is None
    assert [p.id for p in await lifecycle.get_user_posts(user.id, now=just_before)] == [post.id]
    assert await lifecycle.get_user_posts(user.id, now=at_expiry) == []


async def test_aware_now_is_treated_as_utc(make_user, make_draft):
    user = await make_user(credits=10)
    aware_t0 = T0.replace(tzinfo=timezone.utc)
    post = await lifecycle.create_post(user.id, make_draft(credits_cost=2), now=aware_t0)
    assert post.expires_at == T0 + timedelta(hours=24)

    plus_two = timezone(timedelta(hours=2))
    later = (T0 + timedelta(hours=1)).replace(tzinfo=timezone.utc).astimezone(plus_two)
    assert [p.id for p in await lifecycle.get_posts(now=later)] == [post.id]
    assert (await lifecycle.get_post_by_id(post.id, now=later)).id == post.id
    assert [p.id for p in await lifecycle.get_user_posts(user.id, now=later)] == [post.id]

    expired = (T0 + timedelta(hours=24)).replace(tzinfo=timezone.utc).astimezone(plus_two)
    assert await lifecycle.get_post_by_id(post.id, now=expired) is None
    assert await lifecycle.get_posts(now=expired) == []
    dash = await lifecycle.get_user_dashboard(user.id, now=expired)
    assert dash["expired_posts_count"] == 1
