from fastapi import APIRouter, Depends, Query

from app.core.config import get_settings
from app.core.exceptions import PostNotFoundError
from app.deps import get_current_user
from app.models.post import PostCategory, PostDraft
from app.models.user import User
from app.routers.serializers import post_out
from app.services import lifecycle

router = APIRouter()

_settings = get_settings()


@router.post("", status_code=201)
async def post_create(body: PostDraft, user: User = Depends(get_current_user)):
    """Spend credits_cost from the current user and publish for 24 hours."""
    post = await lifecycle.create_post(user.id, body)
    return post_out(post)


@router.get("")
async def posts_list(
    category: PostCategory | None = None,
    country: str | None = None,
    city: str | None = None,
    limit: int = Query(_settings.posts_default_limit, ge=1, le=_settings.posts_max_limit),
    offset: int = Query(0, ge=0),
):
    """Active posts, newest first."""
    items = await lifecycle.get_posts(
        category=category,
        country=country,
        city=city,
        limit=limit,
        offset=offset,
    )
    return {"posts": [post_out(p) for p in items], "limit": limit, "offset": offset}


@router.get("/{post_id}")
async def post_get(post_id: str):
    post = await lifecycle.get_post_by_id(post_id)
    if post is None:
        raise PostNotFoundError()
    return post_out(post)
