"""
Audit Models for Household Ledger

Every write to the ledger is logged for audit purposes.
This provides:
1. Traceability of who changed which entry, loan or category
2. Debugging information when an atomic operation is rolled back
3. A record of translation fallbacks

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger entries
    ENTRY_CREATED = "entry_created"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    TRANSFER_CREATED = "transfer_created"

    # Loans
    LOAN_CREATED = "loan_created"
    LOAN_UPDATED = "loan_updated"
    LOAN_DELETED = "loan_deleted"
    INSTALLMENT_PAID = "installment_paid"

    # Categories
    CATEGORY_CREATED = "category_created"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    TRANSLATION_FALLBACK = "translation_fallback"

    # Homes
    HOME_CREATED = "home_created"
    MEMBER_JOINED = "member_joined"

    # System events
    CONSISTENCY_FAILURE = "consistency_failure"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger write creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'loan', 'category')"
    )
    entity_id: Optional[UUID] = None
    home_id: Optional[UUID] = None
    actor_id: Optional[UUID] = Field(
        default=None,
        description="Member who triggered the event"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate events of one operation"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "home_id": str(self.home_id) if self.home_id else None,
            "actor_id": str(self.actor_id) if self.actor_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_created(entry_id, home_id, actor_id, "EXPENSE", "120.00")
        event = AuditEventBuilder.installment_paid(loan_id, entry_id, actor_id, 5, 6)
    """

    @staticmethod
    def entry_created(
        entry_id: UUID,
        home_id: UUID,
        actor_id: UUID,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_CREATED,
            entity_type="entry",
            entity_id=entry_id,
            home_id=home_id,
            actor_id=actor_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} entry created: {amount}",
            details={"kind": kind, "amount": amount},
        )

    @staticmethod
    def entry_updated(
        entry_id: UUID,
        home_id: UUID,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_UPDATED,
            entity_type="entry",
            entity_id=entry_id,
            home_id=home_id,
            description=f"Entry updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def entry_deleted(entry_id: UUID, home_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            entity_type="entry",
            entity_id=entry_id,
            home_id=home_id,
            description="Entry deleted",
        )

    @staticmethod
    def transfer_created(
        entry_id: UUID,
        home_id: UUID,
        from_user_id: UUID,
        to_user_id: UUID,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_CREATED,
            entity_type="entry",
            entity_id=entry_id,
            home_id=home_id,
            actor_id=from_user_id,
            description=f"Transfer of {amount} created",
            details={
                "from_user_id": str(from_user_id),
                "to_user_id": str(to_user_id),
                "amount": amount,
            },
        )

    @staticmethod
    def loan_created(loan_id: UUID, user_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_CREATED,
            entity_type="loan",
            entity_id=loan_id,
            actor_id=user_id,
            description=f"Loan created: {name}",
            details={"name": name},
        )

    @staticmethod
    def loan_updated(loan_id: UUID, user_id: UUID, changed_fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_UPDATED,
            entity_type="loan",
            entity_id=loan_id,
            actor_id=user_id,
            description=f"Loan updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def loan_deleted(loan_id: UUID, user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_DELETED,
            entity_type="loan",
            entity_id=loan_id,
            actor_id=user_id,
            description="Loan deleted",
        )

    @staticmethod
    def installment_paid(
        loan_id: UUID,
        entry_id: UUID,
        user_id: UUID,
        first: int,
        last: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSTALLMENT_PAID,
            entity_type="loan",
            entity_id=loan_id,
            actor_id=user_id,
            correlation_id=correlation_id,
            description=f"Installments {first}-{last} paid",
            details={
                "expense_entry_id": str(entry_id),
                "first_installment": first,
                "last_installment": last,
            },
        )

    @staticmethod
    def category_changed(
        event_type: AuditEventType,
        category_id: UUID,
        home_id: UUID,
        name: str,
    ) -> AuditEvent:
        verb = {
            AuditEventType.CATEGORY_CREATED: "created",
            AuditEventType.CATEGORY_UPDATED: "updated",
            AuditEventType.CATEGORY_DELETED: "deleted",
        }.get(event_type, "changed")
        return AuditEvent(
            event_type=event_type,
            entity_type="category",
            entity_id=category_id,
            home_id=home_id,
            description=f"Category {verb}: {name}",
            details={"name": name},
        )

    @staticmethod
    def translation_fallback(
        text: str,
        from_lang: str,
        to_lang: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSLATION_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="category",
            description=f"Translation {from_lang}->{to_lang} failed, original text kept",
            details={"text": text, "from_lang": from_lang, "to_lang": to_lang},
            error_message=error_message,
        )

    @staticmethod
    def home_created(home_id: UUID, owner_id: UUID, seeded_categories: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HOME_CREATED,
            entity_type="home",
            entity_id=home_id,
            home_id=home_id,
            actor_id=owner_id,
            description=f"Home created with {seeded_categories} default categories",
            details={"seeded_categories": seeded_categories},
        )

    @staticmethod
    def member_joined(home_id: UUID, member_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_JOINED,
            entity_type="member",
            entity_id=member_id,
            home_id=home_id,
            actor_id=member_id,
            description="Member joined home",
        )

    @staticmethod
    def consistency_failure(
        operation: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSISTENCY_FAILURE,
            severity=AuditSeverity.ERROR,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Atomic operation rolled back: {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
