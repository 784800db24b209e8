from abc import ABC, abstractmethod
from typing import List

from src.domain.entities import AuditEvent


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        pass

    @abstractmethod
    async def list_by_trace_id(self, trace_id: str, limit: int = 200) -> List[AuditEvent]:
        """List audit events for one request trace, oldest first"""
        pass
