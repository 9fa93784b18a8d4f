from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.json_loader import TestDataLoader
from config import ApplicationConfig
from src.adapter.services.identity_service import ConfigIdentityService
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.critical_alert_notifier import ICriticalAlertNotifier
from src.api.utils.jwt import generate_jwt
from src.depends import get_identity_service, get_unit_of_work
from src.domain.base import utc_now
from src.domain.entities import EventRecord, LogLevel, LogType

TEST_USER_ROLES = {"dev-1": "DEV", "user-1": "USER"}


class RecordingAlertNotifier(ICriticalAlertNotifier):
    def __init__(self):
        self.alerts = []

    async def notify(self, record_id, event):
        self.alerts.append((record_id, event))


class TestConfig(ApplicationConfig):
    ENABLE_LOGGING_MIDDLEWARE = False
    LOG_WRITER_WORKERS = 1


class TracedTestConfig(TestConfig):
    ENABLE_LOGGING_MIDDLEWARE = True


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_audit.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def uow_factory(session_factory):
    """Fresh unit of work per use, each on its own session"""

    @asynccontextmanager
    async def factory():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    return factory


@pytest.fixture
def seed(session_factory):
    """Insert event records with explicit timestamps, bypassing the writer"""

    async def _seed(count: int = 1, start: datetime = None, step: timedelta = timedelta(minutes=1), **fields):
        start = start or utc_now() - step * count
        defaults = dict(type=LogType.SYSTEM, level=LogLevel.INFO, operation="SEED")
        defaults.update(fields)
        records = [
            EventRecord(created_at=start + step * index, **defaults) for index in range(count)
        ]
        async with session_factory() as session:
            session.add_all(records)
            await session.commit()
        return records

    return _seed


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "dev-1") -> dict:
        return {"Authorization": f"Bearer {generate_jwt(user_id)}"}

    return _headers


def _build_app(config, uow_factory, session_factory, alert_notifier=None):
    from src.api.app import create_app

    app = create_app(config, uow_factory=uow_factory, alert_notifier=alert_notifier)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_identity_service] = lambda: ConfigIdentityService(
        TEST_USER_ROLES
    )
    return app


@pytest_asyncio.fixture
async def app(uow_factory, session_factory):
    app = _build_app(TestConfig, uow_factory, session_factory)
    yield app
    await app.state.log_writer.stop()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def traced_app(uow_factory, session_factory):
    app = _build_app(TracedTestConfig, uow_factory, session_factory)
    yield app
    await app.state.log_writer.stop()


@pytest_asyncio.fixture
async def traced_client(traced_app):
    transport = ASGITransport(app=traced_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def alert_notifier():
    return RecordingAlertNotifier()


@pytest_asyncio.fixture
async def alerting_app(uow_factory, session_factory, alert_notifier):
    app = _build_app(TestConfig, uow_factory, session_factory, alert_notifier=alert_notifier)
    yield app
    await app.state.log_writer.stop()


@pytest_asyncio.fixture
async def alerting_client(alerting_app):
    transport = ASGITransport(app=alerting_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
