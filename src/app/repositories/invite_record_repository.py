from abc import ABC, abstractmethod
from typing import Any, List, Optional

from src.domain.entities import InviteRecord


class IInviteRecordRepository(ABC):
    """InviteRecord repository interface - application layer"""

    @abstractmethod
    async def get_by_token(
        self, token: str, for_update: bool = False
    ) -> Optional[InviteRecord]:
        """
        Get invite record by access token.

        With for_update the row is re-read from the store (never served from
        the session identity map) and row-locked where the backend supports it.
        """
        pass

    @abstractmethod
    async def get_by_identity_ref(self, identity_ref: str) -> Optional[InviteRecord]:
        """Get invite record by the single-use verify reference"""
        pass

    @abstractmethod
    async def get_latest_pending(
        self, brand: str, email: str, text_for_email: Optional[str] = None
    ) -> Optional[InviteRecord]:
        """Get the most recent PENDING record for brand + email (+ position)"""
        pass

    @abstractmethod
    async def list_by_identity_key(
        self, brand: str, email: str, email_hashes: List[str], text_for_email: str
    ) -> List[InviteRecord]:
        """
        List records for brand + position matching the plaintext email or
        any of the given hashes, newest first.
        """
        pass

    @abstractmethod
    async def list_pending_by_email_and_brand(
        self, email: str, brand: str
    ) -> List[InviteRecord]:
        """List every PENDING record for an email/brand pair"""
        pass

    @abstractmethod
    async def list_by_email_and_brand(
        self, email: str, email_hashes: List[str], brand: str
    ) -> List[InviteRecord]:
        """List all records for an email/brand pair, newest first"""
        pass

    @abstractmethod
    async def create(self, record: InviteRecord) -> InviteRecord:
        """Append a new invite record"""
        pass

    @abstractmethod
    async def update(self, record: InviteRecord) -> InviteRecord:
        """Update existing invite record"""
        pass

    @abstractmethod
    async def update_fields(self, record: InviteRecord, **fields: Any) -> InviteRecord:
        """Set individual fields on a record and persist them"""
        pass
