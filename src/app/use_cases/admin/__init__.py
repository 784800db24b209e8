"""Admin use cases for invite support operations."""

from .generate_invite_link_use_case import (
    GenerateInviteLinkUseCase,
    GenerateInviteLinkResponse,
)
from .get_invite_history_use_case import (
    GetInviteHistoryUseCase,
    InviteHistoryItem,
    InviteHistoryResponse,
)
from .get_trace_events_use_case import GetTraceEventsUseCase
from .revoke_invite_use_case import RevokeInviteUseCase, RevokeInviteResponse
from .rotate_signing_secret_use_case import (
    RotateSigningSecretUseCase,
    RotateSigningSecretResponse,
)
from .unlock_invite_use_case import UnlockInviteUseCase, UnlockInviteResponse

__all__ = [
    "GenerateInviteLinkUseCase",
    "GenerateInviteLinkResponse",
    "RevokeInviteUseCase",
    "RevokeInviteResponse",
    "UnlockInviteUseCase",
    "UnlockInviteResponse",
    "GetInviteHistoryUseCase",
    "InviteHistoryItem",
    "InviteHistoryResponse",
    "GetTraceEventsUseCase",
    "RotateSigningSecretUseCase",
    "RotateSigningSecretResponse",
]
