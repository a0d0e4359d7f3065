from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field

from app.core.clock import utcnow


class User(Document):
    email: Indexed(str, unique=True)
    password_hash: str
    credits: int = Field(default=10, ge=0)
    is_admin: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "users"
