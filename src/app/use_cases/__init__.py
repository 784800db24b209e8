"""
Use Cases

Organized into domain folders:
- verification/: Candidate invite, OTP and access flow
- admin/: Invite support operations
"""

from .admin import (
    GenerateInviteLinkUseCase,
    GetInviteHistoryUseCase,
    GetTraceEventsUseCase,
    RevokeInviteUseCase,
    RotateSigningSecretUseCase,
    UnlockInviteUseCase,
)
from .verification import (
    ConfirmAccessUseCase,
    InspectInviteLinkUseCase,
    OpenAccessLinkUseCase,
    RequestOtpUseCase,
    VerifyOtpUseCase,
)

__all__ = [
    # Verification
    "InspectInviteLinkUseCase",
    "RequestOtpUseCase",
    "VerifyOtpUseCase",
    "OpenAccessLinkUseCase",
    "ConfirmAccessUseCase",
    # Admin
    "GenerateInviteLinkUseCase",
    "RevokeInviteUseCase",
    "UnlockInviteUseCase",
    "GetInviteHistoryUseCase",
    "GetTraceEventsUseCase",
    "RotateSigningSecretUseCase",
]
