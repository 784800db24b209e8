from abc import ABC, abstractmethod
from datetime import datetime


class NotificationService(ABC):
    """Outbound candidate emails. Return False on delivery failure, never raise."""

    @abstractmethod
    async def send_otp_email(
        self,
        email: str,
        brand: str,
        code: str,
        expires_at: datetime,
        verify_url: str,
    ) -> bool:
        pass

    @abstractmethod
    async def send_access_link_email(
        self,
        email: str,
        brand: str,
        text_for_email: str,
        access_url: str,
    ) -> bool:
        pass
