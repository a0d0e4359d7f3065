from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated

import pymongo
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field, HttpUrl, StringConstraints

from app.core.clock import utcnow

# Posts are visible for a fixed window after creation.
POST_TTL = timedelta(hours=24)


class PostCategory(str, Enum):
    TRAVEL = "travel"
    FOOD = "food"
    LIFESTYLE = "lifestyle"
    BUSINESS = "business"
    CULTURE = "culture"
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    TECHNOLOGY = "technology"
    ART = "art"
    OTHER = "other"


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class PostDraft(BaseModel):
    """User-supplied post fields, validated before any credits are touched."""

    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]
    image_url: HttpUrl
    category: PostCategory
    country: NonEmptyStr
    city: NonEmptyStr
    credits_cost: int = Field(gt=0)


class Post(Document):
    user_id: PydanticObjectId
    title: str
    description: str
    image_url: str
    category: PostCategory
    country: str
    city: str
    credits_cost: int = Field(gt=0)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "posts"
        indexes = [
            [("expires_at", pymongo.ASCENDING)],
            [("user_id", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)],
            [("category", pymongo.ASCENDING), ("country", pymongo.ASCENDING), ("city", pymongo.ASCENDING)],
        ]

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now
