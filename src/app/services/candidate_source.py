from abc import ABC, abstractmethod
from typing import Optional


class CandidateSource(ABC):
    """Lookup of invited candidates and their booking links"""

    @abstractmethod
    async def verify_candidate(self, brand: str, email: str, text_for_email: str) -> bool:
        pass

    @abstractmethod
    async def get_booking_url(
        self, brand: str, email: str, text_for_email: str
    ) -> Optional[str]:
        pass
