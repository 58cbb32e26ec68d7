"""Pytest configuration для unit тестов."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.enums import NotificationAction
from src.core.models import Task, User
from src.services.rate_limit import InMemoryRateLimiter
from src.services.storage import InMemoryTaskStore
from src.services.task import TaskService


class FakeClock:
    """Управляемые часы для TaskService (UTC datetime)."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingNotifier:
    """Notifier, запоминающий поставленные в очередь письма."""

    def __init__(self) -> None:
        self.jobs: list[tuple[User, Task, NotificationAction]] = []

    def submit(self, user: User, task: Task, action: NotificationAction) -> bool:
        self.jobs.append((user, task, action))
        return True

    @property
    def actions(self) -> list[NotificationAction]:
        return [action for _, _, action in self.jobs]


@pytest.fixture
def mock_redis() -> MagicMock:
    """Mock Redis client для тестирования."""
    redis = MagicMock()
    redis.incr = AsyncMock(return_value=1)
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.mget = AsyncMock(return_value=[])
    redis.zrevrange = AsyncMock(return_value=[])
    redis.decrby = AsyncMock()
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()

    # Pipeline: команды буферизуются синхронно, execute() асинхронный
    pipe = MagicMock()
    pipe.__aenter__.return_value = pipe
    pipe.__aexit__.return_value = None
    pipe.execute = AsyncMock(return_value=[True, 1])
    redis.pipeline.return_value = pipe
    redis.pipe = pipe

    redis.script = AsyncMock(return_value=[1, 9, "0"])
    redis.register_script.return_value = redis.script
    return redis


@pytest.fixture
def clock() -> FakeClock:
    """Часы, стоящие на 2024-01-01 12:00:00 UTC."""
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def rate_limiter() -> InMemoryRateLimiter:
    return InMemoryRateLimiter(capacity=10, interval_seconds=60)


@pytest.fixture
def task_service(
    store: InMemoryTaskStore,
    rate_limiter: InMemoryRateLimiter,
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> TaskService:
    """TaskService поверх in-memory компонентов."""
    return TaskService(store, rate_limiter, notifier, clock=clock)


@pytest.fixture
def alice() -> User:
    return User.from_email("a@x.com")


@pytest.fixture
def bob() -> User:
    return User.from_email("b@x.com")
