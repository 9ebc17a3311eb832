"""Settlement propagation between an invoice and its splits.

Keeps "invoice paid <=> every split paid" consistent:
- Upward: once every split is paid, the invoice is marked paid
- Downward: a manager marking the invoice paid marks every split paid

Propagation runs as its own write after the triggering write has committed.
If it fails, the earlier write stays and the state is repaired on the next
read (derived status) or by reconcile_invoice() / reconcile_all().
There is no rule that un-pays anything.
"""

import logging
from datetime import datetime, timezone
from typing import NamedTuple

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from propertyhub.database import commit_or_raise, read_or_raise
from propertyhub.errors import NotFoundError
from propertyhub.models import Invoice, InvoiceSplit
from propertyhub.services.audit_service import AuditAction, AuditEntity, AuditService
from propertyhub.services.payment_status import splits_settled

logger = logging.getLogger(__name__)


class ReconcileResult(NamedTuple):
    """Counts of repairs made by a reconciliation run."""

    invoices_checked: int
    invoices_marked_paid: int
    splits_marked_paid: int


class SettlementService:
    """Applies the upward and downward settlement rules against the store."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def _get_invoice(self, invoice_id: int) -> Invoice:
        with read_or_raise(self.db, f"load invoice {invoice_id}"):
            invoice = self.db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def _load_splits(self, invoice_id: int) -> list[InvoiceSplit]:
        with read_or_raise(self.db, f"load splits of invoice {invoice_id}"):
            return (
                self.db.query(InvoiceSplit)
                .filter(InvoiceSplit.invoice_id == invoice_id)
                .order_by(InvoiceSplit.id)
                .all()
            )

    def is_fully_settled(self, invoice_id: int) -> bool:
        """Whether every split of the invoice is paid, read fresh from the store.

        This is the authoritative paid state; the invoice's is_paid column is
        only a cached hint. An invoice without splits is never settled.
        """
        self._get_invoice(invoice_id)
        return splits_settled(self._load_splits(invoice_id))

    def propagate_split_payment(self, invoice_id: int, actor_id: int | None = None) -> bool:
        """Upward rule: mark the invoice paid if all its splits are paid.

        Args:
            invoice_id: Invoice whose split was just paid
            actor_id: User whose action triggered the propagation (for audit)

        Returns:
            True if the invoice is paid after propagation
        """
        invoice = self._get_invoice(invoice_id)
        if invoice.is_paid:
            return True

        if not splits_settled(self._load_splits(invoice_id)):
            return False

        invoice.is_paid = True
        AuditService.log(
            db=self.db,
            entity_type=AuditEntity.INVOICE,
            entity_id=invoice_id,
            action=AuditAction.SETTLE,
            actor_id=actor_id,
            changes={"is_paid": True, "direction": "up"},
        )
        commit_or_raise(self.db, f"mark settled invoice {invoice_id} paid")

        logger.info("Invoice %d settled: all splits paid", invoice_id)
        return True

    def propagate_invoice_payment(self, invoice_id: int, actor_id: int | None = None) -> int:
        """Downward rule: mark every unpaid split of the invoice paid.

        Applies regardless of the splits' prior states. Already paid splits
        keep their original payment_date.

        Args:
            invoice_id: Invoice that was just marked paid
            actor_id: User whose action triggered the propagation (for audit)

        Returns:
            Number of splits changed
        """
        self._get_invoice(invoice_id)
        unpaid = [split for split in self._load_splits(invoice_id) if not split.is_paid]
        if not unpaid:
            return 0

        paid_at = datetime.now(timezone.utc)
        for split in unpaid:
            split.is_paid = True
            split.payment_date = paid_at

        AuditService.log(
            db=self.db,
            entity_type=AuditEntity.INVOICE,
            entity_id=invoice_id,
            action=AuditAction.SETTLE,
            actor_id=actor_id,
            changes={"direction": "down", "split_ids": [split.id for split in unpaid]},
        )
        commit_or_raise(self.db, f"propagate payment of invoice {invoice_id} to its splits")

        logger.info("Invoice %d payment propagated to %d splits", invoice_id, len(unpaid))
        return len(unpaid)

    def reconcile_invoice(self, invoice_id: int) -> ReconcileResult:
        """Repair one invoice left inconsistent by a failed propagation.

        - Paid invoice with unpaid splits: finish the downward cascade
        - Unpaid invoice whose splits are all paid: set the invoice flag
        """
        invoice = self._get_invoice(invoice_id)
        splits = self._load_splits(invoice_id)

        if invoice.is_paid:
            changed = self.propagate_invoice_payment(invoice_id)
            return ReconcileResult(1, 0, changed)

        if splits_settled(splits):
            invoice.is_paid = True
            AuditService.log(
                db=self.db,
                entity_type=AuditEntity.INVOICE,
                entity_id=invoice_id,
                action=AuditAction.RECONCILE,
                changes={"is_paid": True},
            )
            commit_or_raise(self.db, f"reconcile invoice {invoice_id}")
            logger.info("Reconciled invoice %d: marked paid", invoice_id)
            return ReconcileResult(1, 1, 0)

        return ReconcileResult(1, 0, 0)

    def reconcile_all(self) -> ReconcileResult:
        """Reconcile every invoice that is unpaid or still has unpaid splits.

        Suitable for a periodic batch job.
        """
        unpaid_split_invoices = select(InvoiceSplit.invoice_id).where(
            InvoiceSplit.is_paid.is_(False)
        )
        with read_or_raise(self.db, "list invoices to reconcile"):
            invoice_ids = [
                row[0]
                for row in self.db.query(Invoice.id)
                .filter(or_(Invoice.is_paid.is_(False), Invoice.id.in_(unpaid_split_invoices)))
                .order_by(Invoice.id)
                .all()
            ]

        checked = invoices_paid = splits_paid = 0
        for invoice_id in invoice_ids:
            result = self.reconcile_invoice(invoice_id)
            checked += result.invoices_checked
            invoices_paid += result.invoices_marked_paid
            splits_paid += result.splits_marked_paid

        logger.info(
            "Reconciliation checked %d invoices: %d invoices and %d splits marked paid",
            checked,
            invoices_paid,
            splits_paid,
        )
        return ReconcileResult(checked, invoices_paid, splits_paid)


__all__ = ["ReconcileResult", "SettlementService"]
