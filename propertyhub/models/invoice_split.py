"""Invoice split ORM model: one resident's share of an invoice."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertyhub.models import Base, BaseModel


class InvoiceSplit(Base, BaseModel):
    """One resident's share of an invoice.

    All splits of an invoice are written together with the invoice and are
    never added or removed afterwards. Their amounts sum to the invoice amount.
    """

    __tablename__ = "invoice_splits"

    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id"),
        nullable=False,
        index=True,
    )
    resident_id: Mapped[int] = mapped_column(
        ForeignKey("residents.id"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Amount owed by the resident",
    )

    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    payment_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the split was marked paid",
    )

    # Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    invoice: Mapped["Invoice"] = relationship(  # noqa: F821
        "Invoice",
        back_populates="splits",
        foreign_keys=[invoice_id],
    )
    resident: Mapped["Resident"] = relationship(  # noqa: F821
        "Resident",
        foreign_keys=[resident_id],
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("invoice_id", "resident_id", name="uq_invoice_split_resident"),
    )

    def __repr__(self) -> str:
        return (
            f"<InvoiceSplit(id={self.id}, invoice_id={self.invoice_id}, "
            f"resident_id={self.resident_id}, amount={self.amount}, is_paid={self.is_paid})>"
        )


__all__ = ["InvoiceSplit"]
