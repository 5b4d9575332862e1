import os

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DB_ISOLATION_LEVEL", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from friendships.db.models import Base, Friendship, User
from friendships.db.session import build_engine, get_db
from friendships.main import app
from friendships.relationship.repo import get_edge
from friendships.utils.auth import create_token

USERS = {
    1: ("Ada Lovelace", "+44 1000"),
    2: ("Alan Turing", "+44 2000"),
    3: ("Grace Hopper", "+1 3000"),
    4: ("Edsger Dijkstra", "+31 4000"),
    5: ("Barbara Liskov", "+1 5000"),
}


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'friendships.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db:
        db.add_all(
            User(id=uid, full_name=name, phone_number=phone, email=f"user{uid}@example.com")
            for uid, (name, phone) in USERS.items()
        )
        await db.commit()
    return factory


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id: int) -> dict:
        token = create_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def edge_status(session_factory):
    """Read an edge's committed status from a fresh session (None if absent)."""
    async def _status(owner_id: int, target_id: int) -> str | None:
        async with session_factory() as session:
            edge = await get_edge(session, owner_id, target_id)
            return edge.status if edge else None
    return _status


@pytest.fixture
def seed_edges(session_factory):
    async def _seed(*edges: tuple[int, int, str]) -> None:
        async with session_factory() as session:
            session.add_all(
                Friendship(user_id=owner, friend_user_id=target, status=status)
                for owner, target, status in edges
            )
            await session.commit()
    return _seed
