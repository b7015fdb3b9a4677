"""Shared fixtures: a fresh SQLite store per test, a frozen clock, users and an HTTP client."""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from taskflow.config import Settings
from taskflow.db.session import Store
from taskflow.main import create_app
from taskflow.models.task import TaskCreate, TaskStatus
from taskflow.models.user import User, UserRole
from taskflow.services.auth import generate_jwt, hash_password
from taskflow.services.tasks import TaskRepository

TEST_PASSWORD = "Secret123"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
async def store(tmp_path: Path) -> AsyncIterator[Store]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskflow.sqlite3'}")
    store = Store(engine, timeout=5.0)
    await store.create_all()
    yield store
    await store.dispose()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 14, 9, 30))


@pytest.fixture
def repository(store: Store, clock: FrozenClock) -> TaskRepository:
    return TaskRepository(store, clock=clock)


async def make_user(
    store: Store,
    email: str,
    *,
    name: str = "Test User",
    role: UserRole = UserRole.USER,
    is_active: bool = True,
    password: str = TEST_PASSWORD,
) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        role=role,
        is_active=is_active,
    )
    async with store.session() as session:
        session.add(user)
        await session.commit()
    return user


@pytest.fixture
async def owner(store: Store) -> User:
    return await make_user(store, "owner@example.com", name="Olivia Owner")


@pytest.fixture
async def other_user(store: Store) -> User:
    return await make_user(store, "other@example.com", name="Oscar Other")


@pytest.fixture
async def admin(store: Store) -> User:
    return await make_user(store, "admin@example.com", name="Ada Admin", role=UserRole.ADMIN)


async def add_task(repository: TaskRepository, user: User, **fields):
    """Create a task through the repository with a default title."""
    fields.setdefault("title", "A task")
    task_data = TaskCreate.model_validate(fields, context={"now": repository.now()})
    return await repository.create_task(user.id, task_data)


def completion_in_sync(status: TaskStatus, completed_at: datetime | None) -> bool:
    """True when completedAt is set exactly for completed tasks."""
    return (status == TaskStatus.COMPLETED) == (completed_at is not None)


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.JWT_SECRET = "test-secret"
    settings.AUTO_CREATE_TABLES = False
    return settings


@pytest.fixture
async def client(store: Store, settings: Settings) -> AsyncIterator[AsyncClient]:
    app = create_app(settings, store=store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def auth_headers(user: User, settings: Settings) -> dict[str, str]:
    token, _ = generate_jwt(user.id, settings)
    return {"Authorization": f"Bearer {token}"}
