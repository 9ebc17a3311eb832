"""Invoice API routes: creation, listing, details and payment."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from propertyhub.api.deps import get_current_user_id
from propertyhub.database import get_db
from propertyhub.errors import AppError, ValidationError, raise_app_error
from propertyhub.models import Invoice, InvoiceSplit
from propertyhub.schemas.invoices import (
    CreateInvoicePayload,
    InvoiceDetailResponse,
    InvoiceResponse,
    InvoiceSplitResponse,
    ReconcileResponse,
)
from propertyhub.services.invoice_service import InvoiceDetails, InvoiceService
from propertyhub.services.payment_status import (
    invoice_is_paid,
    invoice_status,
    split_status,
)
from propertyhub.services.settlement_service import SettlementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _invoice_response(invoice: Invoice, now: datetime) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        property_id=invoice.property_id,
        property_name=invoice.property.name if invoice.property else None,
        title=invoice.title,
        description=invoice.description,
        amount=invoice.amount,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        is_paid=invoice.is_paid,
        is_recurring=invoice.is_recurring,
        recurrence_frequency=invoice.recurrence_frequency,
        next_recurrence_date=invoice.next_recurrence_date,
        created_by=invoice.created_by,
        created_at=invoice.created_at,
        status=invoice_status(invoice, now),
    )


def _split_response(split: InvoiceSplit, now: datetime) -> InvoiceSplitResponse:
    resident = split.resident
    user = resident.user if resident else None
    return InvoiceSplitResponse(
        id=split.id,
        resident_id=split.resident_id,
        resident_name=user.full_name if user else None,
        unit_number=resident.unit_number if resident else None,
        amount=split.amount,
        is_paid=split.is_paid,
        payment_date=split.payment_date,
        status=split_status(split, now),
    )


def _resolve_manager(manager_id: int | None, current_user_id: int | None) -> int | None:
    """Manager whose properties scope a read: explicit manager_id, else the caller."""
    return manager_id if manager_id is not None else current_user_id


def _detail_response(invoice: Invoice) -> InvoiceDetailResponse:
    now = datetime.now(timezone.utc)
    header = _invoice_response(invoice, now)
    return InvoiceDetailResponse(
        **header.model_dump(),
        is_settled=invoice_is_paid(invoice),
        splits=[_split_response(split, now) for split in invoice.splits],
    )


@router.post("", response_model=InvoiceDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    payload: CreateInvoicePayload,
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_current_user_id),
) -> InvoiceDetailResponse:
    """
    Create an invoice and split it among residents.

    Returns:
        201: Created invoice with its splits
        400: Validation error (amount, percentages, resident selection)
        404: Property not found
    """
    service = InvoiceService(db)
    details = InvoiceDetails(
        property_id=payload.property_id,
        title=payload.title,
        amount=payload.amount,
        issue_date=payload.issue_date,
        due_date=payload.due_date,
        description=payload.description,
        is_recurring=payload.is_recurring,
        recurrence_frequency=payload.recurrence_frequency,
    )
    try:
        invoice_id = service.create_invoice(
            details,
            payload.resident_ids,
            strategy=payload.split_type,
            percentages=payload.percentages,
            created_by=current_user_id,
        )
        return _detail_response(service.get_invoice(invoice_id))
    except AppError as e:
        raise_app_error(e)


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    manager_id: int | None = Query(
        None, description="Property manager whose invoices to list; defaults to the caller"
    ),
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_current_user_id),
) -> list[InvoiceResponse]:
    """
    List invoices of every property the manager runs, newest first.

    The signed-in user (X-User-Id) is the manager unless manager_id is given.

    Returns:
        200: Invoices with derived status
        400: Neither X-User-Id nor manager_id supplied
    """
    try:
        owner_id = _resolve_manager(manager_id, current_user_id)
        if owner_id is None:
            raise ValidationError("X-User-Id header or manager_id is required")
        invoices = InvoiceService(db).list_invoices_for_manager(owner_id)
    except AppError as e:
        raise_app_error(e)

    now = datetime.now(timezone.utc)
    logger.info("Listed %d invoices for manager %d", len(invoices), owner_id)
    return [_invoice_response(invoice, now) for invoice in invoices]


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_invoices(db: Session = Depends(get_db)) -> ReconcileResponse:
    """
    Repair invoices whose paid flag disagrees with their splits.

    Returns:
        200: Counts of checked and repaired rows
    """
    try:
        result = SettlementService(db).reconcile_all()
        return ReconcileResponse(**result._asdict())
    except AppError as e:
        raise_app_error(e)


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
async def get_invoice(
    invoice_id: int,
    manager_id: int | None = Query(None, description="Restrict to this manager's properties"),
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_current_user_id),
) -> InvoiceDetailResponse:
    """
    Invoice details with splits and derived statuses.

    Scoped to the signed-in user (or manager_id) when either is known.

    Returns:
        200: Invoice details
        404: Invoice not found (or not owned by the manager)
    """
    service = InvoiceService(db)
    try:
        owner_id = _resolve_manager(manager_id, current_user_id)
        if owner_id is None:
            invoice = service.get_invoice(invoice_id)
        else:
            invoice = service.get_invoice_for_manager(invoice_id, owner_id)
        return _detail_response(invoice)
    except AppError as e:
        raise_app_error(e)


@router.post("/{invoice_id}/pay", response_model=InvoiceDetailResponse)
async def pay_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_current_user_id),
) -> InvoiceDetailResponse:
    """
    Mark an invoice paid; every split is marked paid as well.

    Returns:
        200: Updated invoice details
        404: Invoice not found
        409: Concurrent modification
    """
    try:
        invoice = InvoiceService(db).mark_invoice_paid(invoice_id, actor_id=current_user_id)
        return _detail_response(invoice)
    except AppError as e:
        raise_app_error(e)


@router.post("/splits/{split_id}/pay", response_model=InvoiceDetailResponse)
async def pay_split(
    split_id: int,
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_current_user_id),
) -> InvoiceDetailResponse:
    """
    Mark one resident's split paid; the invoice settles once all splits are paid.

    Returns:
        200: Updated invoice details
        404: Split not found
        409: Concurrent modification
    """
    service = InvoiceService(db)
    try:
        split = service.mark_split_paid(split_id, actor_id=current_user_id)
        return _detail_response(service.get_invoice(split.invoice_id))
    except AppError as e:
        raise_app_error(e)
