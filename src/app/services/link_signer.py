"""
Link Signer

HMAC-SHA256 signatures for candidate invite links.

A signature covers an ordered tuple of fields followed by the issue
timestamp, joined by ``|``. Only the first 16 hex characters are kept so
links stay short.
"""

import hashlib
import hmac
import re
import time
from datetime import timedelta
from typing import Dict, Optional, Sequence
from urllib.parse import urlencode

from libs.result import Error, Result, Return
from src.app.services.settings import VerificationSettings
from src.domain.brands import is_valid_brand
from src.domain.errors import ErrorCode
from src.domain.identity import normalize_brand, normalize_email, normalize_text

SIGNATURE_PATTERN = re.compile(r"^[0-9a-f]{16}$")


def invite_parts(brand: str, email: str, text_for_email: str) -> list:
    """Ordered, normalised fields signed into an invite link."""
    return [normalize_brand(brand), normalize_email(email), normalize_text(text_for_email)]


class LinkSigner:
    DELIMITER = "|"
    SIGNATURE_LENGTH = 16

    def __init__(
        self,
        secret: bytes,
        max_age: timedelta = timedelta(days=7),
        clock_skew: timedelta = timedelta(minutes=5),
    ):
        if not secret or len(secret) < 32:
            raise ValueError("Signing secret must be at least 32 bytes")
        self._secret = secret
        self.max_age = max_age
        self.clock_skew = clock_skew

    @classmethod
    def from_settings(cls, secret: bytes, settings: VerificationSettings) -> "LinkSigner":
        return cls(secret, max_age=settings.link_max_age, clock_skew=settings.clock_skew)

    def _payload(self, parts: Sequence[str], issued_at: int) -> bytes:
        for part in parts:
            if self.DELIMITER in str(part):
                raise ValueError(f"Signed field may not contain '{self.DELIMITER}'")
        fields = [str(part) for part in parts] + [str(int(issued_at))]
        return self.DELIMITER.join(fields).encode("utf-8")

    def sign(self, parts: Sequence[str], issued_at: int) -> str:
        digest = hmac.new(self._secret, self._payload(parts, issued_at), hashlib.sha256)
        return digest.hexdigest()[: self.SIGNATURE_LENGTH]

    def check_freshness(
        self,
        issued_at: int,
        max_age: Optional[timedelta] = None,
        now: Optional[int] = None,
    ) -> Result[None]:
        """Reject links older than max_age or issued in the future."""
        now = int(time.time()) if now is None else int(now)
        max_age = self.max_age if max_age is None else max_age

        if issued_at - now > self.clock_skew.total_seconds():
            return Return.err(
                Error(ErrorCode.SIGNATURE_INVALID, "Link timestamp is in the future")
            )
        if now - issued_at > max_age.total_seconds():
            return Return.err(Error(ErrorCode.LINK_EXPIRED, "Link has expired"))
        return Return.ok(None)

    def verify(
        self,
        parts: Sequence[str],
        signature: str,
        issued_at: int,
        max_age: Optional[timedelta] = None,
        now: Optional[int] = None,
    ) -> Result[None]:
        """
        Recompute the signature over parts + issued_at and compare in
        constant time. The provided signature is never parsed for content.

        Errors:
            - LINK_EXPIRED: older than max_age
            - SIGNATURE_INVALID: mismatch, malformed, or issued in the future
        """
        freshness = self.check_freshness(issued_at, max_age=max_age, now=now)
        if freshness.is_err():
            return freshness

        try:
            expected = self.sign(parts, issued_at)
        except ValueError:
            return Return.err(Error(ErrorCode.SIGNATURE_INVALID, "Invalid link signature"))

        provided = str(signature or "").strip().lower()
        if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            return Return.err(Error(ErrorCode.SIGNATURE_INVALID, "Invalid link signature"))
        return Return.ok(None)

    def verify_partial(
        self, brand: str, issued_at: int, signature: str, now: Optional[int] = None
    ) -> Result[None]:
        """
        Validate what can be checked before every signed field is known:
        brand, signature shape and timestamp freshness. Full confirmation
        happens later through verify().
        """
        if not is_valid_brand(brand):
            return Return.err(Error(ErrorCode.INVALID_BRAND, "Invalid brand"))
        if not SIGNATURE_PATTERN.match(str(signature or "").strip().lower()):
            return Return.err(Error(ErrorCode.SIGNATURE_INVALID, "Invalid link signature"))
        return self.check_freshness(issued_at, now=now)

    def build_invite_query(
        self,
        brand: str,
        email: str,
        text_for_email: str,
        issued_at: Optional[int] = None,
    ) -> Dict[str, str]:
        """Query parameters for a signed invite link."""
        issued_at = int(time.time()) if issued_at is None else int(issued_at)
        parts = invite_parts(brand, email, text_for_email)
        return {
            "brand": parts[0],
            "e": parts[1],
            "t": parts[2],
            "ts": str(issued_at),
            "sig": self.sign(parts, issued_at),
        }

    def build_invite_link(
        self,
        base_url: str,
        brand: str,
        email: str,
        text_for_email: str,
        issued_at: Optional[int] = None,
    ) -> str:
        query = self.build_invite_query(brand, email, text_for_email, issued_at)
        return f"{base_url.rstrip('/')}/invite?{urlencode(query)}"
