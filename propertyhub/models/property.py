"""Property ORM model: a managed building that invoices are issued against."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertyhub.models import Base, BaseModel


class Property(Base, BaseModel):
    """A building run by one property manager.

    Invoices are issued against a property and split among its residents.
    The property_manager_id column is the row-level ownership filter used
    when listing invoices.
    """

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    property_manager_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="User who manages this property",
    )

    # Relationships
    property_manager: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="managed_properties",
        foreign_keys=[property_manager_id],
    )
    residents: Mapped[list["Resident"]] = relationship(  # noqa: F821
        "Resident",
        back_populates="property",
    )
    invoices: Mapped[list["Invoice"]] = relationship(  # noqa: F821
        "Invoice",
        back_populates="property",
    )

    def __repr__(self) -> str:
        return (
            f"<Property(id={self.id}, name={self.name!r}, "
            f"property_manager_id={self.property_manager_id})>"
        )


__all__ = ["Property"]
