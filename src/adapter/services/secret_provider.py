"""
Signing secret providers.

StoredSecretProvider keeps the HMAC secret in the signing_secrets table,
provisioning it on first use. StaticSecretProvider wraps a configured value.
"""

import logging
import secrets
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.signing_secret_repository import SigningSecretRepository
from src.app.services.secret_provider import SecretProvider
from src.domain.base import utcnow
from src.domain.entities import SigningSecret

logger = logging.getLogger(__name__)

DEFAULT_SECRET_NAME = "invite-link-hmac"
SECRET_BYTES = 32


class StaticSecretProvider(SecretProvider):
    def __init__(self, secret: str):
        if not secret or len(secret) < 32:
            raise ValueError("HMAC_SECRET must be at least 32 characters")
        self._secret = secret.encode("utf-8")

    async def get_secret(self) -> bytes:
        return self._secret


class StoredSecretProvider(SecretProvider):
    """
    Secret persisted in the database.

    Uses its own sessions so provisioning never shares a transaction with
    the request's unit of work.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        name: str = DEFAULT_SECRET_NAME,
    ):
        self.session_factory = session_factory
        self.name = name

    async def get_secret(self) -> bytes:
        # Not cached; a rotation by any worker takes effect on the next read
        async with self.session_factory() as session:
            repo = SigningSecretRepository(session)
            stored = await repo.get_by_name(self.name)
            if stored is None:
                try:
                    stored = await repo.create(
                        SigningSecret(name=self.name, value=secrets.token_hex(SECRET_BYTES))
                    )
                    await session.commit()
                    logger.info("Provisioned signing secret '%s'", self.name)
                except IntegrityError:
                    # Another worker provisioned it first
                    await session.rollback()
                    stored = await repo.get_by_name(self.name)

            return bytes.fromhex(stored.value)

    async def rotate(self) -> SigningSecret:
        """Replace the secret. Every outstanding signed link stops verifying."""
        async with self.session_factory() as session:
            repo = SigningSecretRepository(session)
            stored = await repo.get_by_name(self.name)
            value = secrets.token_hex(SECRET_BYTES)
            if stored is None:
                stored = await repo.create(SigningSecret(name=self.name, value=value))
            else:
                stored.value = value
                stored.rotated_at = utcnow()
                stored = await repo.update(stored)
            await session.commit()

        logger.warning("Signing secret '%s' rotated", self.name)
        return stored
