"""Audit log model for tracking invoice lifecycle events."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for invoice and split changes.

    Records who (actor_id) did what (action) to which entity (entity_type, entity_id)
    and optional field snapshots (changes).
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(String(50), index=False)
    """Entity type being audited: "invoice" or "invoice_split"."""

    entity_id: Mapped[int] = mapped_column(index=False)
    """Primary key of the entity being audited."""

    action: Mapped[str] = mapped_column(String(50), index=False)
    """Action performed: "create", "pay", "settle", "reconcile"."""

    actor_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=False)
    """User who performed the action. None for system actions such as propagation."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, index=False)
    """Optional JSON snapshot of changed fields: {"amount": "90.00", "split_count": 3}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor_id={self.actor_id}, created_at={self.created_at})>"
        )


__all__ = ["AuditLog"]
