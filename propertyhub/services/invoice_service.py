"""Invoice lifecycle: creation with per-resident splits and payment updates."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Mapping, NamedTuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from propertyhub.database import commit_or_raise, read_or_raise
from propertyhub.errors import NotFoundError, PersistenceError, ValidationError
from propertyhub.models import Invoice, InvoiceSplit, Property, RecurrenceFrequency, Resident
from propertyhub.services.audit_service import AuditAction, AuditEntity, AuditService
from propertyhub.services.payment_status import PaymentStatus, invoice_status
from propertyhub.services.recurrence import next_recurrence_date
from propertyhub.services.resident_service import ResidentService
from propertyhub.services.settlement_service import SettlementService
from propertyhub.services.split_calculator import (
    SplitCalculator,
    SplitStrategy,
    check_amount,
    to_cents,
)

logger = logging.getLogger(__name__)


@dataclass
class InvoiceDetails:
    """Header fields of an invoice as entered by the property manager."""

    property_id: int
    title: str
    amount: Decimal
    issue_date: date
    due_date: date
    description: str | None = None
    is_recurring: bool = False
    recurrence_frequency: RecurrenceFrequency | None = None


class PendingSummary(NamedTuple):
    """Outstanding invoices of a property, for dashboards."""

    pending_count: int
    pending_total: Decimal


class InvoiceService:
    """Invoice creation and payment operations.

    The store is the source of truth: every operation re-reads the rows it
    needs instead of trusting objects held by the caller.
    """

    def __init__(self, db: Session, calculator: SplitCalculator | None = None):
        """Initialize with database session and an optional split calculator."""
        self.db = db
        self.calculator = calculator or SplitCalculator()
        self.settlement = SettlementService(db)
        self.residents = ResidentService(db)

    def _validate_details(self, details: InvoiceDetails) -> None:
        if not details.title or not details.title.strip():
            raise ValidationError("Title is required")

        if details.amount is None:
            raise ValidationError("Invoice amount must be a positive number")
        check_amount(details.amount)

        if details.is_recurring:
            if details.recurrence_frequency is None:
                raise ValidationError("Recurring invoices need a recurrence frequency")
            try:
                RecurrenceFrequency(details.recurrence_frequency)
            except ValueError as e:
                raise ValidationError(
                    f"Unknown recurrence frequency: {details.recurrence_frequency}"
                ) from e

    def _validate_selection(self, property_id: int, resident_ids: list[int]) -> None:
        """Reject residents that are not active residents of the property."""
        if not self.residents.property_exists(property_id):
            raise NotFoundError(f"Property {property_id} not found")

        eligible = {r.resident_id for r in self.residents.list_eligible_residents(property_id)}
        ineligible = [resident_id for resident_id in resident_ids if resident_id not in eligible]
        if ineligible:
            raise ValidationError(
                f"Residents {ineligible} are not active residents of property {property_id}"
            )

    def create_invoice(
        self,
        details: InvoiceDetails,
        resident_ids: Iterable[int],
        strategy: SplitStrategy = SplitStrategy.EQUAL,
        percentages: Mapping[int, Decimal] | None = None,
        created_by: int | None = None,
    ) -> int:
        """Create an invoice together with one split per selected resident.

        All validation, including the split computation, happens before any
        write. The invoice and its splits are then committed in one
        transaction.

        Args:
            details: Invoice header fields
            resident_ids: Residents to split the invoice among
            strategy: EQUAL or CUSTOM split
            percentages: Resident to percentage mapping for CUSTOM splits
            created_by: Current user id from the identity provider

        Returns:
            ID of the created invoice

        Raises:
            ValidationError: Invalid header fields, selection or percentages
            NotFoundError: Property does not exist
            PersistenceError: The store rejected the write
        """
        try:
            self._validate_details(details)
            resident_ids = list(resident_ids)
            shares = self.calculator.calculate_splits(
                details.amount, resident_ids, strategy, percentages
            )
            self._validate_selection(details.property_id, [share.resident_id for share in shares])
        except ValidationError as e:
            logger.warning("Invoice rejected for property %s: %s", details.property_id, e.message)
            raise

        amount = to_cents(details.amount)
        frequency = (
            RecurrenceFrequency(details.recurrence_frequency) if details.is_recurring else None
        )

        invoice = Invoice(
            property_id=details.property_id,
            title=details.title.strip(),
            description=details.description or "",
            amount=amount,
            issue_date=details.issue_date,
            due_date=details.due_date,
            is_paid=False,
            is_recurring=details.is_recurring,
            recurrence_frequency=frequency,
            next_recurrence_date=(
                next_recurrence_date(details.issue_date, frequency) if frequency else None
            ),
            created_by=created_by,
        )

        try:
            self.db.add(invoice)
            self.db.flush()  # Get invoice ID
            invoice_id = invoice.id

            for share in shares:
                self.db.add(
                    InvoiceSplit(
                        invoice_id=invoice_id,
                        resident_id=share.resident_id,
                        amount=share.amount,
                        is_paid=False,
                    )
                )

            AuditService.log(
                db=self.db,
                entity_type=AuditEntity.INVOICE,
                entity_id=invoice_id,
                action=AuditAction.CREATE,
                actor_id=created_by,
                changes={
                    "title": invoice.title,
                    "amount": str(amount),
                    "strategy": SplitStrategy(strategy).value,
                    "splits": {str(share.resident_id): str(share.amount) for share in shares},
                },
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to write invoice for property %d: %s", details.property_id, e)
            raise PersistenceError("Failed to create invoice") from e

        commit_or_raise(self.db, "create invoice")

        logger.info(
            "Created invoice %d for property %d: amount=%s, %d splits (%s)",
            invoice_id,
            details.property_id,
            amount,
            len(shares),
            SplitStrategy(strategy).value,
        )
        return invoice_id

    def get_invoice(self, invoice_id: int) -> Invoice:
        """Get invoice by ID with its splits loaded.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        with read_or_raise(self.db, f"load invoice {invoice_id}"):
            invoice = (
                self.db.query(Invoice)
                .options(
                    selectinload(Invoice.splits)
                    .joinedload(InvoiceSplit.resident)
                    .joinedload(Resident.user)
                )
                .filter(Invoice.id == invoice_id)
                .first()
            )
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def get_split(self, split_id: int) -> InvoiceSplit:
        """Get split by ID.

        Raises:
            NotFoundError: If the split does not exist
        """
        with read_or_raise(self.db, f"load invoice split {split_id}"):
            split = self.db.get(InvoiceSplit, split_id)
        if split is None:
            raise NotFoundError(f"Invoice split {split_id} not found")
        return split

    def get_invoice_for_manager(self, invoice_id: int, manager_id: int) -> Invoice:
        """Get an invoice only if it belongs to a property the manager runs.

        Raises:
            NotFoundError: If missing or owned by another manager
        """
        invoice = self.get_invoice(invoice_id)
        with read_or_raise(self.db, f"load owner of invoice {invoice_id}"):
            owner_id = (
                self.db.query(Property.property_manager_id)
                .filter(Property.id == invoice.property_id)
                .scalar()
            )
        if owner_id != manager_id:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def list_invoices_for_manager(self, manager_id: int) -> list[Invoice]:
        """List invoices of every property the manager runs, newest first."""
        with read_or_raise(self.db, f"list invoices of manager {manager_id}"):
            return (
                self.db.query(Invoice)
                .join(Property, Property.id == Invoice.property_id)
                .options(joinedload(Invoice.property), selectinload(Invoice.splits))
                .filter(Property.property_manager_id == manager_id)
                .order_by(Invoice.created_at.desc(), Invoice.id.desc())
                .all()
            )

    def pending_summary(self, property_id: int, now: datetime | None = None) -> PendingSummary:
        """Count and total of the property's invoices that are not settled.

        Overdue invoices count as pending here.
        """
        with read_or_raise(self.db, f"load invoices of property {property_id}"):
            invoices = (
                self.db.query(Invoice)
                .options(selectinload(Invoice.splits))
                .filter(Invoice.property_id == property_id)
                .all()
            )
        outstanding = [
            invoice for invoice in invoices if invoice_status(invoice, now) != PaymentStatus.PAID
        ]
        total = sum((invoice.amount for invoice in outstanding), Decimal("0.00"))
        return PendingSummary(len(outstanding), total)

    def mark_invoice_paid(self, invoice_id: int, actor_id: int | None = None) -> Invoice:
        """Mark an invoice paid and cascade to every split.

        Manager override, independent of the splits' states. Marking an
        already paid invoice is a no-op write but still completes the cascade.

        Raises:
            NotFoundError: If the invoice does not exist
            PersistenceError: If either write fails; a failed cascade leaves the
                invoice paid and is repaired by reconciliation
        """
        with read_or_raise(self.db, f"load invoice {invoice_id}"):
            invoice = self.db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")

        if invoice.is_paid:
            logger.info("Invoice %d already paid", invoice_id)
        else:
            invoice.is_paid = True
            AuditService.log(
                db=self.db,
                entity_type=AuditEntity.INVOICE,
                entity_id=invoice_id,
                action=AuditAction.PAY,
                actor_id=actor_id,
                changes={"is_paid": True},
            )
            commit_or_raise(self.db, f"mark invoice {invoice_id} paid")
            logger.info("Invoice %d marked paid by %s", invoice_id, actor_id)

        self.settlement.propagate_invoice_payment(invoice_id, actor_id=actor_id)
        return self.get_invoice(invoice_id)

    def mark_split_paid(self, split_id: int, actor_id: int | None = None) -> InvoiceSplit:
        """Mark one split paid, then settle the invoice if every split is paid.

        Marking an already paid split keeps its original payment date.

        Raises:
            NotFoundError: If the split does not exist
            PersistenceError: If the split write or the propagation fails
        """
        split = self.get_split(split_id)
        invoice_id = split.invoice_id

        if split.is_paid:
            logger.info("Invoice split %d already paid", split_id)
        else:
            split.is_paid = True
            split.payment_date = datetime.now(timezone.utc)
            AuditService.log(
                db=self.db,
                entity_type=AuditEntity.INVOICE_SPLIT,
                entity_id=split_id,
                action=AuditAction.PAY,
                actor_id=actor_id,
                changes={"is_paid": True, "invoice_id": invoice_id},
            )
            commit_or_raise(self.db, f"mark invoice split {split_id} paid")
            logger.info("Invoice split %d of invoice %d marked paid", split_id, invoice_id)

        self.settlement.propagate_split_payment(invoice_id, actor_id=actor_id)
        return self.get_split(split_id)


__all__ = ["InvoiceDetails", "InvoiceService", "PendingSummary"]
