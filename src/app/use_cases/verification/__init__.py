"""
Verification Use Cases

Candidate-facing flow: invite link -> OTP -> access link -> booking URL.
"""

from .confirm_access_use_case import ConfirmAccessUseCase
from .dtos import (
    AccessLinkResponse,
    ConfirmAccessCommand,
    ConfirmAccessResponse,
    InspectInviteLinkCommand,
    InviteLinkResponse,
    OpenAccessLinkCommand,
    RequestOtpCommand,
    RequestOtpResponse,
    VerifyOtpCommand,
    VerifyOtpResponse,
)
from .inspect_invite_link_use_case import InspectInviteLinkUseCase
from .open_access_link_use_case import OpenAccessLinkUseCase
from .request_otp_use_case import RequestOtpUseCase
from .verify_otp_use_case import VerifyOtpUseCase

__all__ = [
    # Use Cases
    "InspectInviteLinkUseCase",
    "RequestOtpUseCase",
    "VerifyOtpUseCase",
    "OpenAccessLinkUseCase",
    "ConfirmAccessUseCase",
    # DTOs - Commands
    "InspectInviteLinkCommand",
    "RequestOtpCommand",
    "VerifyOtpCommand",
    "OpenAccessLinkCommand",
    "ConfirmAccessCommand",
    # DTOs - Responses
    "InviteLinkResponse",
    "RequestOtpResponse",
    "VerifyOtpResponse",
    "AccessLinkResponse",
    "ConfirmAccessResponse",
]
