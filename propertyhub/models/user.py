"""User ORM model for managers and residents."""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propertyhub.models import Base, BaseModel


class User(Base, BaseModel):
    """Any person in the system: property managers and residents alike.

    Only the display identity is kept here. Sign-in and profile management
    belong to the identity provider.
    """

    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Sign-in email address",
    )

    managed_properties: Mapped[list["Property"]] = relationship(  # noqa: F821
        "Property",
        back_populates="property_manager",
    )

    __table_args__ = (Index("idx_user_email", "email"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.full_name!r}, email={self.email!r})>"


__all__ = ["User"]
