"""Post store: persistence and queries for posts.

Returns raw records; whether a post is visible is decided by the caller
against an explicit `now`, except for the feed queries which only ever
return active posts.
"""

from datetime import datetime
from typing import Any

from beanie import PydanticObjectId

from app.core.config import get_settings
from app.core.pagination import validate_page
from app.core.store import store_errors
from app.models.post import POST_TTL, Post, PostCategory, PostDraft


def _newest_first(query):
    # _id breaks created_at ties in insertion order
    return query.sort(-Post.created_at, -Post.id)


async def insert(user_id: PydanticObjectId, draft: PostDraft, now: datetime) -> Post:
    post = Post(
        user_id=user_id,
        title=draft.title,
        description=draft.description,
        image_url=str(draft.image_url),
        category=draft.category,
        country=draft.country,
        city=draft.city,
        credits_cost=draft.credits_cost,
        expires_at=now + POST_TTL,
        created_at=now,
        updated_at=now,
    )
    with store_errors("insert_post"):
        await post.insert()
    return post


async def get_by_id(post_id: PydanticObjectId) -> Post | None:
    with store_errors("get_post"):
        return await Post.get(post_id)


async def query(
    now: datetime,
    category: PostCategory | None = None,
    country: str | None = None,
    city: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Post]:
    """Active posts matching the filters, newest first."""
    limit, offset = validate_page(limit, offset, max_limit=get_settings().posts_max_limit)
    conditions = [Post.expires_at > now]
    if category is not None:
        conditions.append(Post.category == PostCategory(category))
    if country:
        conditions.append(Post.country == country)
    if city:
        conditions.append(Post.city == city)
    with store_errors("query_posts"):
        return await _newest_first(Post.find(*conditions)).skip(offset).limit(limit).to_list()


async def query_by_user(user_id: PydanticObjectId, now: datetime, include_expired: bool = False) -> list[Post]:
    conditions = [Post.user_id == user_id]
    if not include_expired:
        conditions.append(Post.expires_at > now)
    with store_errors("query_user_posts"):
        return await _newest_first(Post.find(*conditions)).to_list()


async def recent_by_user(user_id: PydanticObjectId, limit: int = 10) -> list[Post]:
    """Newest posts of a user regardless of expiry."""
    with store_errors("recent_user_posts"):
        return await _newest_first(Post.find(Post.user_id == user_id)).limit(limit).to_list()


async def count_by_user(user_id: PydanticObjectId, now: datetime) -> tuple[int, int]:
    """Return (active, expired) post counts; a post expiring exactly at now is expired."""
    with store_errors("count_user_posts"):
        active = await Post.find(Post.user_id == user_id, Post.expires_at > now).count()
        expired = await Post.find(Post.user_id == user_id, Post.expires_at <= now).count()
    return active, expired


async def credits_spent_by_user(user_id: PydanticObjectId) -> int:
    with store_errors("sum_user_credits"):
        total = await Post.find(Post.user_id == user_id).sum(Post.credits_cost)
    return int(total or 0)


async def delete_expired(now: datetime) -> int:
    with store_errors("delete_expired"):
        result = await Post.find(Post.expires_at <= now).delete()
    return result.deleted_count if result else 0


def empty_facets() -> dict[str, Any]:
    return {
        "categories": [c.value for c in PostCategory],
        "countries": [],
        "cities": [],
        "locations": [],
        "stats": {"total_posts": 0, "total_countries": 0, "total_cities": 0},
    }


async def aggregate_facets() -> dict[str, Any]:
    """Categories (always the full enum) plus locations derived from every stored post.

    Expired posts that the sweep has not removed yet still count.
    """
    pipeline = [{"$group": {"_id": "$country", "cities": {"$addToSet": "$city"}}}]
    with store_errors("aggregate_facets"):
        groups = await Post.aggregate(pipeline).to_list()
        total_posts = await Post.find_all().count()

    locations = sorted(
        ({"country": g["_id"], "cities": sorted(set(g["cities"]))} for g in groups),
        key=lambda loc: loc["country"],
    )
    countries = [loc["country"] for loc in locations]
    cities = sorted({city for loc in locations for city in loc["cities"]})

    facets = empty_facets()
    facets.update(
        countries=countries,
        cities=cities,
        locations=locations,
        stats={
            "total_posts": total_posts,
            "total_countries": len(countries),
            "total_cities": len(cities),
        },
    )
    return facets
