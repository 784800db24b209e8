from typing import Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent
from src.domain.identity import mask_email, normalize_brand


async def record_event(
    uow: UnitOfWork,
    action: str,
    trace_id: str = "",
    brand: str = "",
    email: str = "",
    metadata: Optional[dict] = None,
    actor: str = "SYSTEM",
) -> AuditEvent:
    """Append an audit event inside the caller's transaction. Email is masked here."""
    event = AuditEvent(
        trace_id=trace_id or "",
        brand=normalize_brand(brand),
        email_masked=mask_email(email),
        action=action,
        event_metadata=metadata or {},
        actor=actor,
    )
    return await uow.audit_events.create(event)
