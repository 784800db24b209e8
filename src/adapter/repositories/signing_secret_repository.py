from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.signing_secret_repository import ISigningSecretRepository
from src.domain.entities import SigningSecret


class SigningSecretRepository(ISigningSecretRepository):
    """SigningSecret repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_name(self, name: str) -> Optional[SigningSecret]:
        """Get secret by name"""
        stmt = select(SigningSecret).where(SigningSecret.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, secret: SigningSecret) -> SigningSecret:
        """Create a new secret"""
        self.session.add(secret)
        await self.session.flush()
        await self.session.refresh(secret)
        return secret

    async def update(self, secret: SigningSecret) -> SigningSecret:
        """Update existing secret"""
        self.session.add(secret)
        await self.session.flush()
        await self.session.refresh(secret)
        return secret
