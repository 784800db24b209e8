"""
Invite Verification Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ACTIVE_TOKEN_STATUSES,
    BLOCKING_TOKEN_STATUSES,
    LockState,
    OtpStatus,
    TokenStatus,
)

# Export all entities
from .audit_event import AuditEvent
from .invite_record import InviteRecord
from .signing_secret import SigningSecret

__all__ = [
    # Enums
    "OtpStatus",
    "TokenStatus",
    "LockState",
    "ACTIVE_TOKEN_STATUSES",
    "BLOCKING_TOKEN_STATUSES",
    # Entities
    "InviteRecord",
    "AuditEvent",
    "SigningSecret",
]
