"""Pydantic schemas for resident selection."""

from pydantic import BaseModel, ConfigDict


class EligibleResidentResponse(BaseModel):
    """Resident offered for selection on the invoice form."""

    resident_id: int
    display_name: str
    unit_number: str

    model_config = ConfigDict(from_attributes=True)
