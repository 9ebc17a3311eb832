"""Audit trail for invoice lifecycle events."""

from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from propertyhub.models.audit_log import AuditLog


class AuditEntity(str, Enum):
    """Kinds of rows whose changes are audited."""

    INVOICE = "invoice"
    INVOICE_SPLIT = "invoice_split"


class AuditAction(str, Enum):
    """What happened to the audited row."""

    CREATE = "create"
    PAY = "pay"
    SETTLE = "settle"  # propagation between an invoice and its splits
    RECONCILE = "reconcile"


class AuditService:
    """Writes audit rows into the caller's session.

    The row is committed together with the change it describes, so a failed
    write leaves no audit entry behind.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: AuditEntity | str,
        entity_id: int,
        action: AuditAction | str,
        actor_id: int | None = None,
        changes: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Add an audit row for an invoice or split change.

        Args:
            db: Database session holding the change
            entity_type: AuditEntity of the changed row
            entity_id: Primary key of the changed row
            action: AuditAction performed
            actor_id: User who triggered it; None for the reconciliation job
            changes: JSON-serializable snapshot of the changed fields

        Raises:
            ValueError: If entity_type or action is not part of the audit vocabulary
        """
        audit = AuditLog(
            entity_type=AuditEntity(entity_type).value,
            entity_id=entity_id,
            action=AuditAction(action).value,
            actor_id=actor_id,
            changes=changes,
        )
        db.add(audit)
        return audit


__all__ = ["AuditAction", "AuditEntity", "AuditService"]
