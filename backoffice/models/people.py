"""
Back Office Reporting - People Model

Customers and suppliers a unit trades with. Invoices carry their
counterparty; the debt/receivable report lists it per invoice.
"""

import uuid

from sqlalchemy import ForeignKey, String, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import BaseModel


class People(BaseModel):
    """Trading partner of a unit."""

    __tablename__ = "people"

    __table_args__ = (
        UniqueConstraint("code", "unit_id", name="uq_people_code_unit"),
    )

    unit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<People(id={self.id}, code={self.code})>"
