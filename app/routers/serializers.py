"""Response shapes. Credential material never leaves the service."""

from typing import Any

from app.models.post import Post
from app.models.user import User


def user_out(user: User) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "email": user.email,
        "credits": user.credits,
        "is_admin": user.is_admin,
        "created_at": user.created_at.isoformat(),
        "updated_at": user.updated_at.isoformat(),
    }


def post_out(post: Post) -> dict[str, Any]:
    return {
        "id": str(post.id),
        "user_id": str(post.user_id),
        "title": post.title,
        "description": post.description,
        "image_url": post.image_url,
        "category": post.category.value,
        "country": post.country,
        "city": post.city,
        "credits_cost": post.credits_cost,
        "expires_at": post.expires_at.isoformat(),
        "created_at": post.created_at.isoformat(),
        "updated_at": post.updated_at.isoformat(),
    }
