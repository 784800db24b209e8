"""
Verification Use Case DTOs

Commands carry the candidate's request; responses never include OTP
codes, access tokens or booking URLs except where a flow step exists
to hand one over.
"""

from typing import Optional

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class InspectInviteLinkCommand(BaseModel):
    brand: str
    text_for_email: str
    issued_at: int
    signature: str
    email: Optional[str] = None


class RequestOtpCommand(BaseModel):
    brand: str
    email: str
    text_for_email: str
    issued_at: int
    signature: str
    trace_id: str = ""


class VerifyOtpCommand(BaseModel):
    otp: str
    identity_ref: Optional[str] = None
    brand: Optional[str] = None
    email: Optional[str] = None
    text_for_email: Optional[str] = None
    trace_id: str = ""


class OpenAccessLinkCommand(BaseModel):
    token: str
    brand: Optional[str] = None
    trace_id: str = ""


class ConfirmAccessCommand(BaseModel):
    token: str
    trace_id: str = ""


# ============================================================================
# Response DTOs
# ============================================================================


class InviteLinkResponse(BaseModel):
    """What the invite page may show before a code is requested"""

    brand: str
    brand_name: str
    text_for_email: str
    otp_enabled: bool
    fully_verified: bool
    link_expires_at: str


class RequestOtpResponse(BaseModel):
    identity_ref: str
    expires_at: str
    email_sent: bool
    message: str
    trace_id: str


class VerifyOtpResponse(BaseModel):
    status: str
    token_expires_at: str
    email_sent: bool
    message: str
    trace_id: str


class AccessLinkResponse(BaseModel):
    brand: str
    brand_name: str
    text_for_email: str
    token_status: str
    expires_at: str


class ConfirmAccessResponse(BaseModel):
    redirect_url: str
