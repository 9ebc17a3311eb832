"""Pydantic schemas for invoice creation, listing and payment."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from propertyhub.models import RecurrenceFrequency
from propertyhub.services.payment_status import PaymentStatus
from propertyhub.services.split_calculator import SplitStrategy


class CreateInvoicePayload(BaseModel):
    """Payload for POST /invoices."""

    property_id: int = Field(..., description="Property the invoice is issued against")
    title: str = Field(..., description="Invoice title")
    description: str | None = Field(None, description="Optional details")
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Total amount, positive with at most 10 integer digits and 2 decimals",
    )
    issue_date: date
    due_date: date
    split_type: SplitStrategy = Field(SplitStrategy.EQUAL, description="'equal' or 'custom'")
    resident_ids: list[int] = Field(..., description="Residents to split the invoice among")
    percentages: dict[int, Decimal] | None = Field(
        None, description="Resident id to percentage, required for custom splits"
    )
    is_recurring: bool = False
    recurrence_frequency: RecurrenceFrequency | None = None


class InvoiceSplitResponse(BaseModel):
    """One resident's share with its derived status."""

    id: int
    resident_id: int
    resident_name: str | None = None
    unit_number: str | None = None
    amount: Decimal
    is_paid: bool
    payment_date: datetime | None
    status: PaymentStatus

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
    """Invoice header with its derived status."""

    id: int
    property_id: int
    property_name: str | None = None
    title: str
    description: str
    amount: Decimal
    issue_date: date
    due_date: date
    is_paid: bool
    is_recurring: bool
    recurrence_frequency: RecurrenceFrequency | None
    next_recurrence_date: date | None
    created_by: int | None
    created_at: datetime
    status: PaymentStatus

    model_config = ConfigDict(from_attributes=True)


class InvoiceDetailResponse(InvoiceResponse):
    """Invoice with its splits, as shown on the details screen."""

    is_settled: bool
    splits: list[InvoiceSplitResponse]


class ReconcileResponse(BaseModel):
    """Result of a reconciliation run."""

    invoices_checked: int
    invoices_marked_paid: int
    splits_marked_paid: int


class PendingSummaryResponse(BaseModel):
    """Outstanding invoices of a property."""

    property_id: int
    pending_count: int
    pending_total: Decimal
