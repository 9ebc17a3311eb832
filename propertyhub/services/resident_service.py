"""Resident selection: which residents of a property can be billed."""

import logging
from typing import NamedTuple

from sqlalchemy.orm import Session

from propertyhub.database import read_or_raise
from propertyhub.models import Property, Resident, User

logger = logging.getLogger(__name__)


class EligibleResident(NamedTuple):
    """Selectable resident with display fields for the invoice form."""

    resident_id: int
    display_name: str
    unit_number: str


class ResidentService:
    """Read-only access to the residents an invoice can be split among."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def list_eligible_residents(self, property_id: int) -> list[EligibleResident]:
        """List active residents of a property ordered by unit number.

        Args:
            property_id: Property to list residents for

        Returns:
            EligibleResident tuples; empty if the property has no active residents
        """
        with read_or_raise(self.db, f"list residents of property {property_id}"):
            rows = (
                self.db.query(Resident.id, Resident.unit_number, User.first_name, User.last_name)
                .join(User, User.id == Resident.user_id)
                .filter(Resident.property_id == property_id, Resident.is_active.is_(True))
                .order_by(Resident.unit_number.asc(), Resident.id.asc())
                .all()
            )
        residents = [
            EligibleResident(
                resident_id=resident_id,
                display_name=f"{first_name} {last_name}".strip(),
                unit_number=unit_number,
            )
            for resident_id, unit_number, first_name, last_name in rows
        ]
        logger.debug("Property %d has %d eligible residents", property_id, len(residents))
        return residents

    def property_exists(self, property_id: int) -> bool:
        with read_or_raise(self.db, f"load property {property_id}"):
            return self.db.get(Property, property_id) is not None


__all__ = ["EligibleResident", "ResidentService"]
