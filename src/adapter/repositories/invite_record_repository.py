from typing import Any, List, Optional

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invite_record_repository import IInviteRecordRepository
from src.domain.entities import InviteRecord, OtpStatus
from src.domain.identity import normalize_brand, normalize_email, text_key


class InviteRecordRepository(IInviteRecordRepository):
    """InviteRecord repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(
        self, token: str, for_update: bool = False
    ) -> Optional[InviteRecord]:
        """Get invite record by access token"""
        stmt = select(InviteRecord).where(InviteRecord.token == token)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_identity_ref(self, identity_ref: str) -> Optional[InviteRecord]:
        """Get invite record by the single-use verify reference"""
        stmt = select(InviteRecord).where(InviteRecord.identity_ref == identity_ref)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_latest_pending(
        self, brand: str, email: str, text_for_email: Optional[str] = None
    ) -> Optional[InviteRecord]:
        """Get the most recent PENDING record for brand + email (+ position)"""
        stmt = select(InviteRecord).where(
            InviteRecord.brand == normalize_brand(brand),
            InviteRecord.email == normalize_email(email),
            InviteRecord.otp_status == OtpStatus.pending,
        )
        if text_for_email:
            stmt = stmt.where(
                func.lower(InviteRecord.text_for_email) == text_key(text_for_email)
            )
        stmt = stmt.order_by(InviteRecord.created_at.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_identity_key(
        self, brand: str, email: str, email_hashes: List[str], text_for_email: str
    ) -> List[InviteRecord]:
        """List records for an identity key, newest first"""
        email_match = [InviteRecord.email == normalize_email(email)]
        if email_hashes:
            email_match.append(InviteRecord.email_hash.in_(email_hashes))

        stmt = (
            select(InviteRecord)
            .where(
                InviteRecord.brand == normalize_brand(brand),
                func.lower(InviteRecord.text_for_email) == text_key(text_for_email),
                or_(*email_match),
            )
            .order_by(InviteRecord.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_pending_by_email_and_brand(
        self, email: str, brand: str
    ) -> List[InviteRecord]:
        """List every PENDING record for an email/brand pair"""
        stmt = select(InviteRecord).where(
            InviteRecord.email == normalize_email(email),
            InviteRecord.brand == normalize_brand(brand),
            InviteRecord.otp_status == OtpStatus.pending,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_email_and_brand(
        self, email: str, email_hashes: List[str], brand: str
    ) -> List[InviteRecord]:
        """List all records for an email/brand pair, newest first"""
        email_match = [InviteRecord.email == normalize_email(email)]
        if email_hashes:
            email_match.append(InviteRecord.email_hash.in_(email_hashes))

        stmt = (
            select(InviteRecord)
            .where(InviteRecord.brand == normalize_brand(brand), or_(*email_match))
            .order_by(InviteRecord.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, record: InviteRecord) -> InviteRecord:
        """Append a new invite record"""
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return record

    async def update(self, record: InviteRecord) -> InviteRecord:
        """Update existing invite record"""
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return record

    async def update_fields(self, record: InviteRecord, **fields: Any) -> InviteRecord:
        """Set individual fields on a record and persist them"""
        for name, value in fields.items():
            if name not in InviteRecord.model_fields:
                raise AttributeError(f"InviteRecord has no field '{name}'")
            setattr(record, name, value)
        return await self.update(record)
