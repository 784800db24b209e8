"""
Invite Verification Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class OtpStatus(str, Enum):
    """One-time passcode status"""

    pending = "PENDING"
    verified = "VERIFIED"
    expired = "EXPIRED"
    failed = "FAILED"
    superseded = "SUPERSEDED"


class TokenStatus(str, Enum):
    """Access token status (ISSUED -> CONFIRMED -> USED)"""

    issued = "ISSUED"
    confirmed = "CONFIRMED"
    used = "USED"
    revoked = "REVOKED"
    expired = "EXPIRED"


class LockState(str, Enum):
    """Invite lock flag shared by every row of an identity key"""

    none = ""
    locked = "LOCKED"
    unlocked = "UNLOCK"  # admin override, newest row only


# Token states that can still move forward
ACTIVE_TOKEN_STATUSES = (TokenStatus.issued, TokenStatus.confirmed)

# Token states that block any new invite for the same identity key
BLOCKING_TOKEN_STATUSES = (TokenStatus.used, TokenStatus.revoked)
