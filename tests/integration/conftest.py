import time
from typing import List

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import (
    get_candidate_source,
    get_lock_service,
    get_notification_service,
    get_secret_provider,
    get_unit_of_work,
)
from src.adapter.services.candidate_source import StaticCandidateSource
from src.adapter.services.lock_service import InMemoryLockService
from src.adapter.services.secret_provider import StoredSecretProvider
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.link_signer import LinkSigner
from src.app.services.notification_service import NotificationService

BOOKING_LINKS = {
    "ROYAL": {"CL200": "https://calendar.google.com/calendar/u/0/appointments/schedules/AcZ200"}
}


class CapturingNotificationService(NotificationService):
    """Keeps sent emails in memory so tests can read the code and access link"""

    def __init__(self):
        self.otp_emails: List[dict] = []
        self.access_emails: List[dict] = []

    async def send_otp_email(self, email, brand, code, expires_at, verify_url) -> bool:
        self.otp_emails.append({"email": email, "brand": brand, "code": code, "url": verify_url})
        return True

    async def send_access_link_email(self, email, brand, text_for_email, access_url) -> bool:
        token = access_url.split("token=", 1)[1]
        self.access_emails.append({"email": email, "brand": brand, "url": access_url, "token": token})
        return True


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
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
def notifier():
    return CapturingNotificationService()


@pytest.fixture
def secret_provider(session_factory):
    return StoredSecretProvider(session_factory)


@pytest.fixture
def lock_service():
    return InMemoryLockService()


@pytest.fixture
def app(session_factory, notifier, secret_provider, lock_service):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # One session per request, like production
    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    candidate_source = StaticCandidateSource(booking_links=BOOKING_LINKS)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_notification_service] = lambda: notifier
    app.dependency_overrides[get_secret_provider] = lambda: secret_provider
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_candidate_source] = lambda: candidate_source
    return app


@pytest_asyncio.fixture
async def client(app):
    from httpx import ASGITransport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers():
    from config import ApplicationConfig

    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY, "X-Admin-Actor": "ops@example.com"}


@pytest_asyncio.fixture
async def sign_invite(secret_provider):
    """Signed invite query parameters, as found in the candidate's link"""

    async def _sign(brand="ROYAL", email="a@x.com", text_for_email="Waiter-CL200", issued_at=None):
        signer = LinkSigner(await secret_provider.get_secret())
        return signer.build_invite_query(
            brand, email, text_for_email, issued_at=issued_at or int(time.time())
        )

    return _sign
