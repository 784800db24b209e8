"""
InviteRecord Entity

One row per invite issuance attempt.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import LockState, OtpStatus, TokenStatus


class InviteRecord(SQLModel, table=True):
    """
    InviteRecord entity - OTP and access token state for one invite attempt.

    Business Rules:
    - Created by OTP issuance, never deleted (audit trail)
    - At most one PENDING OTP per (email, brand)
    - Token status only moves ISSUED -> CONFIRMED -> USED,
      or to REVOKED/EXPIRED from ISSUED/CONFIRMED
    - USED requires a VERIFIED OTP and an unexpired token
    - LOCKED is written to every row of the identity key once a token is USED
    """

    __tablename__ = "invite_records"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Identity key
    brand: str = Field(max_length=32, nullable=False)
    email: str = Field(max_length=255, nullable=False)
    email_hash: str = Field(max_length=64, nullable=False)  # SHA-256 hex
    text_for_email: str = Field(max_length=500, nullable=False)

    booking_url: Optional[str] = Field(default=None, max_length=2000)

    # Single-use reference carried by the verify link
    identity_ref: str = Field(unique=True, index=True, max_length=64)

    # OTP
    otp: Optional[str] = Field(default=None, max_length=12)
    otp_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )
    otp_attempts: int = Field(default=0)
    otp_status: OtpStatus = Field(default=OtpStatus.pending)

    # Access token
    token: Optional[str] = Field(default=None, unique=True, index=True, max_length=64)
    token_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )
    token_status: Optional[TokenStatus] = Field(default=None)

    locked: LockState = Field(default=LockState.none)

    trace_id: str = Field(default="", max_length=64)

    # Timestamps
    verified_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )
    used_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invite_identity_key", "brand", "email_hash", "text_for_email"),
        Index("idx_invite_brand_email", "brand", "email"),
        Index("idx_invite_otp_status", "otp_status"),
        Index("idx_invite_created_at", "created_at"),
    )

    def is_otp_expired(self, now: datetime) -> bool:
        return self.otp_expires_at is None or now > self.otp_expires_at

    def is_token_expired(self, now: datetime) -> bool:
        return self.token_expires_at is None or now > self.token_expires_at
