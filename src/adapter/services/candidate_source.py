from typing import Dict, Iterable, Optional, Tuple

from src.app.services.booking_url import extract_cl_code
from src.app.services.candidate_source import CandidateSource
from src.domain.identity import normalize_brand, normalize_email, text_key


class StaticCandidateSource(CandidateSource):
    """
    Candidate roster loaded from configuration.

    An empty roster accepts every candidate. Booking links come from the
    roster entry first, then from the per-brand CL code table.
    """

    def __init__(
        self,
        roster: Optional[Iterable[dict]] = None,
        booking_links: Optional[Dict[str, Dict[str, str]]] = None,
    ):
        self._entries: Dict[Tuple[str, str, str], dict] = {}
        for entry in roster or []:
            key = self._key(entry.get("brand"), entry.get("email"), entry.get("text_for_email"))
            self._entries[key] = entry

        self._booking_links: Dict[str, Dict[str, str]] = {}
        for brand, links in (booking_links or {}).items():
            self._booking_links[normalize_brand(brand)] = {
                str(code).upper(): url for code, url in (links or {}).items()
            }

    @classmethod
    def from_config(cls, config) -> "StaticCandidateSource":
        return cls(roster=config.CANDIDATE_ROSTER, booking_links=config.BOOKING_LINKS)

    @staticmethod
    def _key(brand, email, text_for_email) -> Tuple[str, str, str]:
        return (normalize_brand(brand), normalize_email(email), text_key(text_for_email))

    async def verify_candidate(self, brand: str, email: str, text_for_email: str) -> bool:
        if not self._entries:
            return True
        return self._key(brand, email, text_for_email) in self._entries

    async def get_booking_url(
        self, brand: str, email: str, text_for_email: str
    ) -> Optional[str]:
        entry = self._entries.get(self._key(brand, email, text_for_email))
        if entry and entry.get("booking_url"):
            return entry["booking_url"]

        cl_code = extract_cl_code(text_for_email)
        if cl_code is None:
            return None
        return self._booking_links.get(normalize_brand(brand), {}).get(cl_code)
