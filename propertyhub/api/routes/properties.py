"""Property-scoped API routes: resident selection and invoice summary."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from propertyhub.database import get_db
from propertyhub.errors import AppError, NotFoundError, raise_app_error
from propertyhub.schemas.invoices import PendingSummaryResponse
from propertyhub.schemas.residents import EligibleResidentResponse
from propertyhub.services.invoice_service import InvoiceService
from propertyhub.services.resident_service import ResidentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("/{property_id}/residents", response_model=list[EligibleResidentResponse])
async def list_residents(
    property_id: int, db: Session = Depends(get_db)
) -> list[EligibleResidentResponse]:
    """
    Residents that can be selected for a new invoice.

    Returns:
        200: Active residents ordered by unit number
        404: Property not found
    """
    service = ResidentService(db)
    try:
        if not service.property_exists(property_id):
            raise NotFoundError(f"Property {property_id} not found")
        residents = service.list_eligible_residents(property_id)
    except AppError as e:
        raise_app_error(e)

    return [EligibleResidentResponse(**resident._asdict()) for resident in residents]


@router.get("/{property_id}/invoices/summary", response_model=PendingSummaryResponse)
async def invoice_summary(property_id: int, db: Session = Depends(get_db)) -> PendingSummaryResponse:
    """
    Count and total of the property's outstanding invoices.

    Returns:
        200: Pending summary
        404: Property not found
    """
    try:
        if not ResidentService(db).property_exists(property_id):
            raise NotFoundError(f"Property {property_id} not found")
        summary = InvoiceService(db).pending_summary(property_id)
    except AppError as e:
        raise_app_error(e)

    logger.debug("Property %d has %d pending invoices", property_id, summary.pending_count)
    return PendingSummaryResponse(
        property_id=property_id,
        pending_count=summary.pending_count,
        pending_total=summary.pending_total,
    )
