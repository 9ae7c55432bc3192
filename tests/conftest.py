import os
import sys

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

# Ensure the backend package (app) is on sys.path for imports during tests
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are read at import time, so they must exist before importing app.*
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-only-secret-key")

from app.core.database import get_db, init_models  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.core.websocket_manager import ConnectionRegistry  # noqa: E402
from app.main import app  # noqa: E402
from app.services.notification_service import (  # noqa: E402
    NotificationDispatcher,
    get_notification_dispatcher,
)

OWNER_ID = "00000000-0000-0000-0000-00000000000a"
BIDDER_B_ID = "00000000-0000-0000-0000-00000000000b"
BIDDER_C_ID = "00000000-0000-0000-0000-00000000000c"
OUTSIDER_D_ID = "00000000-0000-0000-0000-00000000000d"


def auth_headers(user_id: str) -> dict:
    token = create_access_token({"user_id": user_id})
    return {"Authorization": f"Bearer {token}"}


class FakeWebSocket:
    """Collects whatever the registry sends to it."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_text(self, message: str):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(message)


@pytest.fixture
async def engine(tmp_path):
    # A file database so that concurrent sessions use separate connections
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def dispatcher(registry):
    return NotificationDispatcher(registry)


@pytest.fixture
async def client(session_factory, dispatcher):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_gig(client, owner_id=OWNER_ID, title="Build a landing page", budget=500):
    response = await client.post(
        "/gigs/",
        json={"title": title, "description": "Need a responsive landing page.", "budget": budget},
        headers=auth_headers(owner_id),
    )
    assert response.status_code == 201, response.text
    return response.json()


async def submit_bid(client, gig_id, bidder_id, price=400, message="I can deliver this within a week."):
    return await client.post(
        f"/gigs/{gig_id}/bids",
        json={"message": message, "price": price},
        headers=auth_headers(bidder_id),
    )
