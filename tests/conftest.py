from pathlib import Path
import sys
import os

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Must be in place before phindex.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdefghijklmnop")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_BUCKET_NAME", "phindex-test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("DB_SCHEMA", None)

from phindex.database import Base, get_async_session
from phindex.main import app
from phindex.models import Account, PersonProfile
from phindex.utils.token_utils import create_access_token


@pytest.fixture()
async def session_factory(tmp_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite3'}")
    if engine.url.get_backend_name() != "sqlite":
        raise RuntimeError("Test database must be SQLite. Refusing to run destructive test setup.")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def asgi_transport(session_factory):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    yield httpx.ASGITransport(app=app)
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(asgi_transport):
    async with httpx.AsyncClient(transport=asgi_transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_token():
    def _make(user_id: str) -> str:
        return create_access_token(user_id, email=f"{user_id}@example.com")
    return _make


@pytest.fixture()
def auth_headers(make_token):
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


@pytest.fixture()
async def owner(db_session):
    account = Account(id="owner-0001", nickname="OwnerOne", role="user")
    db_session.add(account)
    await db_session.commit()
    return account


@pytest.fixture()
async def admin(db_session):
    account = Account(id="admin-0001", nickname="AdminOne", role="admin")
    db_session.add(account)
    await db_session.commit()
    return account


@pytest.fixture()
def make_profile(db_session, owner):
    async def _make(name: str = "Jane Doe", **fields) -> PersonProfile:
        slug = fields.pop("slug", name.lower().replace(" ", "-"))
        profile = PersonProfile(
            user_id=fields.pop("user_id", owner.id),
            name=name,
            slug=slug,
            category=fields.pop("category", "User Profiles"),
            country=fields.pop("country", "Portugal"),
            ancestry=fields.pop("ancestry", "Portuguese"),
            gender=fields.pop("gender", "female"),
            height=fields.pop("height", 168),
            front_image_url=fields.pop(
                "front_image_url", f"https://phindex-test.s3.us-east-1.amazonaws.com/profiles/{slug}/front/a.png"
            ),
            **fields,
        )
        db_session.add(profile)
        await db_session.commit()
        await db_session.refresh(profile)
        return profile
    return _make


@pytest.fixture()
async def profile(make_profile):
    return await make_profile()
