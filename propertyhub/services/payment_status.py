"""Read-time payment status derivation for invoices and splits.

Status is never stored: "overdue" depends on the current time, so it is
recomputed on every read.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Iterable

from propertyhub.models import Invoice, InvoiceSplit


class PaymentStatus(str, Enum):
    """Badge shown next to an invoice or split."""

    PAID = "paid"
    OVERDUE = "overdue"
    PENDING = "pending"


def derive_status(is_paid: bool, due_date: date, now: datetime | None = None) -> PaymentStatus:
    """Derive the payment status from the paid flag and due date.

    Paid wins regardless of due date. Otherwise the item is overdue once the
    start of its due date (UTC) is strictly before now, and pending before that.
    """
    if is_paid:
        return PaymentStatus.PAID

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    due_at = datetime.combine(due_date, time.min, tzinfo=timezone.utc)
    if due_at < now:
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


def splits_settled(splits: Iterable[InvoiceSplit]) -> bool:
    """True when there is at least one split and every split is paid."""
    splits = list(splits)
    return bool(splits) and all(split.is_paid for split in splits)


def invoice_is_paid(invoice: Invoice) -> bool:
    """Paid state of an invoice, trusting its splits over the stored flag.

    The stored flag is only consulted for an invoice without splits.
    """
    if invoice.splits:
        return splits_settled(invoice.splits)
    return invoice.is_paid


def invoice_status(invoice: Invoice, now: datetime | None = None) -> PaymentStatus:
    return derive_status(invoice_is_paid(invoice), invoice.due_date, now)


def split_status(split: InvoiceSplit, now: datetime | None = None) -> PaymentStatus:
    return derive_status(split.is_paid, split.invoice.due_date, now)


__all__ = [
    "PaymentStatus",
    "derive_status",
    "invoice_is_paid",
    "invoice_status",
    "split_status",
    "splits_settled",
]
