"""
SigningSecret Entity

Persisted HMAC secret for signed invite links.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class SigningSecret(SQLModel, table=True):
    """
    SigningSecret entity - lazily provisioned link-signing secret.

    Business Rules:
    - Generated once (32 random bytes, hex) the first time it is needed
    - Rotation replaces the value and invalidates every outstanding link
    """

    __tablename__ = "signing_secrets"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    name: str = Field(unique=True, index=True, max_length=64)
    value: str = Field(max_length=128)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    rotated_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )
