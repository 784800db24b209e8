"""
Verification Error Codes

Every failure a use case can return. Only LOCK_TIMEOUT and
STORE_UNAVAILABLE may be retried by the caller; everything else is
permanent for that link, code or token.
"""


class ErrorCode:
    # Signed links
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    LINK_EXPIRED = "LINK_EXPIRED"
    MISSING_PARAMS = "MISSING_PARAMS"
    INVALID_BRAND = "INVALID_BRAND"

    # Issuance
    INVITE_BLOCKED = "INVITE_BLOCKED"
    INVITE_NOT_FOUND = "INVITE_NOT_FOUND"
    CANDIDATE_NOT_VERIFIED = "CANDIDATE_NOT_VERIFIED"

    # OTP
    OTP_NOT_FOUND = "OTP_NOT_FOUND"
    OTP_EXPIRED = "OTP_EXPIRED"
    OTP_LOCKED = "OTP_LOCKED"
    OTP_INVALID = "OTP_INVALID"
    OTP_SUPERSEDED = "OTP_SUPERSEDED"
    OTP_ALREADY_VERIFIED = "OTP_ALREADY_VERIFIED"

    # Access token
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_ALREADY_USED = "TOKEN_ALREADY_USED"
    TOKEN_REVOKED = "TOKEN_REVOKED"
    TOKEN_NOT_VERIFIED = "TOKEN_NOT_VERIFIED"
    TOKEN_NOT_ISSUABLE = "TOKEN_NOT_ISSUABLE"
    BRAND_MISMATCH = "BRAND_MISMATCH"
    NO_BOOKING_URL = "NO_BOOKING_URL"
    BAD_BOOKING_URL = "BAD_BOOKING_URL"

    # Infrastructure
    LOCK_TIMEOUT = "LOCK_TIMEOUT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    # Admin
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_API_KEY = "INVALID_API_KEY"
    SECRET_NOT_ROTATABLE = "SECRET_NOT_ROTATABLE"


RETRYABLE_CODES = frozenset({ErrorCode.LOCK_TIMEOUT, ErrorCode.STORE_UNAVAILABLE})


def is_retryable(code: str) -> bool:
    return code in RETRYABLE_CODES
