"""
Brand Registry

Static registry of the brands that may issue interview invites.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .identity import normalize_brand


@dataclass(frozen=True)
class Brand:
    code: str
    name: str
    otp_enabled: bool = True
    token_expiry_hours: Optional[int] = None  # overrides the global default


BRANDS: Dict[str, Brand] = {
    "ROYAL": Brand(code="ROYAL", name="Royal Caribbean"),
    "COSTA": Brand(code="COSTA", name="Costa Cruises"),
    "SEACHEFS": Brand(code="SEACHEFS", name="Seachefs"),
    "CPD": Brand(code="CPD", name="CPD"),
}


def get_brand(code: str) -> Optional[Brand]:
    if not code:
        return None
    return BRANDS.get(normalize_brand(code))


def is_valid_brand(code: str) -> bool:
    return get_brand(code) is not None


def all_brand_codes() -> List[str]:
    return list(BRANDS.keys())
