"""
AuditEvent Entity

Immutable log of every invite state transition.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable log of invite events.

    Business Rules:
    - Immutable (never updated or deleted)
    - Email is stored masked only
    - Tokens appear as 8-character prefixes in metadata
    - actor is SYSTEM for candidate flows, the admin identity otherwise
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    trace_id: str = Field(default="", max_length=64, index=True)
    brand: str = Field(default="", max_length=32)
    email_masked: str = Field(default="", max_length=255)

    action: str = Field(max_length=100)  # e.g., "OTP_CREATED", "TOKEN_CONSUMED"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    actor: str = Field(default="SYSTEM", max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_brand_action", "brand", "action"),
    )
