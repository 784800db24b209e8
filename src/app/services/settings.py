"""
Verification Settings

Configuration object injected into the signer and the OTP/token engines.
Built once from ApplicationConfig at startup and passed explicitly; the
engines never read global configuration themselves.
"""

from datetime import timedelta
from typing import Dict

from pydantic import BaseModel, Field

from src.domain.brands import get_brand
from src.domain.identity import normalize_brand


class VerificationSettings(BaseModel):
    link_max_age: timedelta = timedelta(days=7)
    clock_skew: timedelta = timedelta(minutes=5)
    otp_expiry: timedelta = timedelta(minutes=10)
    otp_length: int = Field(default=6, ge=4, le=10)
    otp_max_attempts: int = Field(default=3, ge=1)
    token_expiry: timedelta = timedelta(hours=48)
    brand_token_expiry: Dict[str, timedelta] = Field(default_factory=dict)
    lock_timeout: timedelta = timedelta(seconds=10)
    public_base_url: str = "http://localhost:8000"

    @classmethod
    def from_config(cls, config) -> "VerificationSettings":
        return cls(
            link_max_age=timedelta(days=config.LINK_EXPIRY_DAYS),
            clock_skew=timedelta(seconds=config.CLOCK_SKEW_SECONDS),
            otp_expiry=timedelta(minutes=config.OTP_EXPIRY_MINUTES),
            otp_length=config.OTP_LENGTH,
            otp_max_attempts=config.OTP_MAX_ATTEMPTS,
            token_expiry=timedelta(hours=config.TOKEN_EXPIRY_HOURS),
            brand_token_expiry={
                normalize_brand(brand): timedelta(hours=hours)
                for brand, hours in (getattr(config, "BRAND_TOKEN_EXPIRY_HOURS", None) or {}).items()
            },
            lock_timeout=timedelta(seconds=config.LOCK_TIMEOUT_SECONDS),
            public_base_url=str(config.PUBLIC_BASE_URL).rstrip("/"),
        )

    def token_expiry_for(self, brand: str) -> timedelta:
        """Access token lifetime, brand override first."""
        key = normalize_brand(brand)
        if key in self.brand_token_expiry:
            return self.brand_token_expiry[key]
        registered = get_brand(key)
        if registered and registered.token_expiry_hours:
            return timedelta(hours=registered.token_expiry_hours)
        return self.token_expiry

    def verify_url(self, identity_ref: str) -> str:
        return f"{self.public_base_url}/verify?ref={identity_ref}"

    def access_url(self, token: str) -> str:
        return f"{self.public_base_url}/access?token={token}"
