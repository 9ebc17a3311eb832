"""Service layer: split computation, invoice lifecycle and settlement."""

from propertyhub.services.invoice_service import InvoiceDetails, InvoiceService, PendingSummary
from propertyhub.services.payment_status import PaymentStatus, derive_status
from propertyhub.services.resident_service import EligibleResident, ResidentService
from propertyhub.services.settlement_service import ReconcileResult, SettlementService
from propertyhub.services.split_calculator import (
    SplitCalculator,
    SplitShare,
    SplitStrategy,
    calculate_splits,
)

__all__ = [
    "EligibleResident",
    "InvoiceDetails",
    "InvoiceService",
    "PaymentStatus",
    "PendingSummary",
    "ReconcileResult",
    "ResidentService",
    "SettlementService",
    "SplitCalculator",
    "SplitShare",
    "SplitStrategy",
    "calculate_splits",
    "derive_status",
]
