"""
Back Office Reporting - Unit Model

A unit is the organizational scope (branch/store) every transaction and
ledger entry is partitioned by.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.models.base import BaseModel

if TYPE_CHECKING:
    from backoffice.models.transaction import Transaction


class Unit(BaseModel):
    """Organizational unit that owns transactions and ledgers."""

    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, unique=True)

    transactions: Mapped[List["Transaction"]] = relationship(
        "Transaction",
        back_populates="unit",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, name={self.name})>"
