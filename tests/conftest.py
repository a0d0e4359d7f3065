import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

os.environ.setdefault("MONGODB_DB_NAME", "postboard_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")



@pytest_asyncio.fixture
async def db() -> AsyncGenerator[None, None]:
    """Fresh in-memory MongoDB bound to all document models."""
    from app.db.init import init_db
    await init_db(client=AsyncMongoMockClient())
    yield


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    from app.main import app
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_user(db):
    from app.core.security import hash_password
    from app.models.user import User

    async def _make(email: str = "user@example.com", credits: int = 10, is_admin: bool = False, password: str = "secret123") -> User:
        user = User(email=email, password_hash=hash_password(password), credits=credits, is_admin=is_admin)
        await user.insert()
        return user

    return _make


@pytest.fixture
def make_draft():
    from app.models.post import PostDraft

    def _make(**overrides) -> PostDraft:
        fields = {
            "title": "Sunset over the harbour",
            "description": "Golden hour from the pier.",
            "image_url": "https://images.example.com/sunset.jpg",
            "category": "travel",
            "country": "Portugal",
            "city": "Lisbon",
            "credits_cost": 1,
        }
        fields.update(overrides)
        return PostDraft(**fields)

    return _make
