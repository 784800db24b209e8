from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.candidate_source import StaticCandidateSource
from src.adapter.services.lock_service import InMemoryLockService, RedisLockService
from src.adapter.services.notification_service import (
    LoggingNotificationService,
    SmtpNotificationService,
)
from src.adapter.services.secret_provider import StaticSecretProvider, StoredSecretProvider
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.settings import VerificationSettings
from src.domain.base import generate_trace_id

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


def _build_lock_service():
    if ApplicationConfig.LOCK_BACKEND == "redis":
        import redis.asyncio as redis

        client = redis.from_url(ApplicationConfig.REDIS_URL)
        return RedisLockService(client)
    return InMemoryLockService()


def _build_secret_provider():
    if ApplicationConfig.HMAC_SECRET:
        return StaticSecretProvider(ApplicationConfig.HMAC_SECRET)
    return StoredSecretProvider(AsyncSessionLocal)


def _build_notification_service():
    if ApplicationConfig.SMTP_ENABLED:
        return SmtpNotificationService.from_config(ApplicationConfig)
    return LoggingNotificationService()


# Process-wide collaborators; the consume lock must be shared by every request
settings = VerificationSettings.from_config(ApplicationConfig)
lock_service = _build_lock_service()
secret_provider = _build_secret_provider()
notification_service = _build_notification_service()
candidate_source = StaticCandidateSource.from_config(ApplicationConfig)


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_settings() -> VerificationSettings:
    return settings


def get_lock_service():
    return lock_service


def get_secret_provider():
    return secret_provider


def get_notification_service():
    return notification_service


def get_candidate_source():
    return candidate_source


def get_trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "") or generate_trace_id()
