"""Credit note issued when an invoice is voided."""

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import validates

from backend.app.core.exceptions import StateError
from backend.app.core.time import utc_now
from backend.app.db.base_class import Base
from backend.app.models.enums import InvoiceType


class CreditNote(Base):
    __tablename__ = "credit_notes"
    __table_args__ = (UniqueConstraint("series", "number", name="uq_credit_notes_series_number"),)

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    series = Column(Integer, nullable=False)
    number = Column(Integer, nullable=False)
    issue_date = Column(Date, nullable=False)
    amount = Column(Numeric(16, 5), nullable=False)
    reason = Column(String(500), nullable=False)
    invoice_type = Column(Enum(InvoiceType), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    @validates("series", "number", "issue_date", "amount", "reason", "invoice_type")
    def _write_once(self, key, value):
        if getattr(self, key) is not None:
            raise StateError(f"Credit note field '{key}' cannot be changed once issued")
        return value

    @property
    def formatted_number(self) -> str:
        return f"{self.series}-{(self.number or 0):08d}"
