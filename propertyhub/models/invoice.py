"""Invoice ORM model: a billable charge issued against a property."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertyhub.models import Base, BaseModel


class RecurrenceFrequency(str, Enum):
    """How often a recurring invoice is reissued."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Invoice(Base, BaseModel):
    """
    Invoice issued by a property manager and split among residents.

    is_paid only ever moves from False to True, either by a direct manager
    action or once every split is paid. It is a cached hint: the settled
    state derived from the splits is authoritative.
    """

    __tablename__ = "invoices"

    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
        comment="Property the invoice is issued against",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Total invoice amount, always positive",
    )

    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    is_paid: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
    )

    # Recurrence
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurrence_frequency: Mapped[RecurrenceFrequency | None] = mapped_column(
        SQLEnum(RecurrenceFrequency),
        nullable=True,
        comment="Set only for recurring invoices",
    )
    next_recurrence_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        comment="User who issued the invoice",
    )

    # Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    property: Mapped["Property"] = relationship(  # noqa: F821
        "Property",
        back_populates="invoices",
        foreign_keys=[property_id],
    )
    splits: Mapped[list["InvoiceSplit"]] = relationship(  # noqa: F821
        "InvoiceSplit",
        back_populates="invoice",
        order_by="InvoiceSplit.id",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_invoice_amount_positive"),
        Index("idx_invoice_property_paid", "property_id", "is_paid"),
        Index("idx_invoice_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Invoice(id={self.id}, property_id={self.property_id}, title={self.title!r}, "
            f"amount={self.amount}, due_date={self.due_date}, is_paid={self.is_paid})>"
        )


__all__ = ["Invoice", "RecurrenceFrequency"]
