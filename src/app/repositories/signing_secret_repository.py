from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import SigningSecret


class ISigningSecretRepository(ABC):
    """SigningSecret repository interface - application layer"""

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[SigningSecret]:
        """Get secret by name"""
        pass

    @abstractmethod
    async def create(self, secret: SigningSecret) -> SigningSecret:
        """Create a new secret"""
        pass

    @abstractmethod
    async def update(self, secret: SigningSecret) -> SigningSecret:
        """Update existing secret"""
        pass
