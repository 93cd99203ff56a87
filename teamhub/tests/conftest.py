import itertools
import sys
from pathlib import Path


sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from teamhub.core.enums import Role, Tenancy, UserStatus
from teamhub.core.settings import settings
from teamhub.models import Base
from teamhub.schemas.milestones import MilestoneRead
from teamhub.schemas.tasks import TaskRead
from teamhub.schemas.users import UserRead
from teamhub.services.events import EventHub
from teamhub.services.identity import IdentityProvider
from teamhub.services.store import DocumentStore

ROOT_UID = "root-uid"


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture(autouse=True)
def configure_settings(monkeypatch):
    monkeypatch.setattr(settings, "super_admin_uid", ROOT_UID)
    monkeypatch.setattr(settings, "tenancy", Tenancy.SINGLE)
    monkeypatch.setattr(settings, "jwt_secret", "test-secret-with-enough-entropy-0123456789")
    monkeypatch.setattr(settings, "min_password_length", 6)
    return settings


@pytest.fixture
def multi_team(monkeypatch):
    monkeypatch.setattr(settings, "tenancy", Tenancy.MULTI)
    return settings


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def hub():
    return EventHub()


@pytest.fixture
def store(session, hub):
    return DocumentStore(session, hub)


@pytest.fixture
def identity(session, hub):
    return IdentityProvider(session, hub)


@pytest.fixture
def user_factory(store):
    counter = itertools.count(1)

    async def factory(role=Role.STAFF, **kwargs):
        n = next(counter)
        uid = kwargs.get("uid", f"user-{n}")
        return await store.create(
            "users",
            {
                "email": kwargs.get("email", f"{uid}@example.com"),
                "display_name": kwargs.get("display_name", f"User {n}"),
                "role": role,
                "status": kwargs.get("status", UserStatus.ACTIVE),
                "team_id": kwargs.get("team_id"),
            },
            id=uid,
        )

    return factory


@pytest_asyncio.fixture
async def active_milestone(store):
    return await store.create(
        "milestones",
        {"title": "Q4 launch", "deadline": 1_900_000_000_000, "status": "active", "progress": 10},
        id="active",
    )


@pytest.fixture
def make_user():
    """In-memory user snapshots for the pure rule functions."""

    def factory(uid, role, **kwargs):
        return UserRead(uid=uid, role=role, display_name=kwargs.pop("display_name", uid), **kwargs)

    return factory


@pytest.fixture
def make_task():
    counter = itertools.count(1)

    def factory(**kwargs):
        kwargs.setdefault("id", f"task-{next(counter)}")
        kwargs.setdefault("title", "Task")
        kwargs.setdefault("milestone_id", "active")
        return TaskRead(**kwargs)

    return factory


@pytest.fixture
def open_milestone():
    return MilestoneRead(id="active", title="Q4 launch", deadline=1_900_000_000_000)


@pytest_asyncio.fixture
async def client(monkeypatch, session_maker):
    from teamhub.main import app

    monkeypatch.setattr("teamhub.services.base.SessionLocal", session_maker)
    app.state.hub = EventHub()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
