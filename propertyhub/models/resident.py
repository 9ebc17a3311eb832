"""Resident ORM model linking a user to a unit of a property."""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertyhub.models import Base, BaseModel


class Resident(Base, BaseModel):
    """A user living in a unit of a property.

    Invoice splits reference residents by id only; name and unit are
    display fields for listings.
    """

    __tablename__ = "residents"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)

    # Only active residents can be selected for new invoices
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])  # noqa: F821
    property: Mapped["Property"] = relationship(  # noqa: F821
        "Property",
        back_populates="residents",
        foreign_keys=[property_id],
    )

    __table_args__ = (Index("idx_resident_property_active", "property_id", "is_active"),)

    def __repr__(self) -> str:
        return (
            f"<Resident(id={self.id}, user_id={self.user_id}, property_id={self.property_id}, "
            f"unit_number={self.unit_number!r}, is_active={self.is_active})>"
        )


__all__ = ["Resident"]
