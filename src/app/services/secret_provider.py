from abc import ABC, abstractmethod


class SecretProvider(ABC):
    """Source of the HMAC secret used to sign invite links"""

    @abstractmethod
    async def get_secret(self) -> bytes:
        pass
