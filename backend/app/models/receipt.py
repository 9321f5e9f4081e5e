"""Receipt header persisted for every settlement."""

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base
from backend.app.models.enums import PaymentMethod


class Receipt(Base):
    __tablename__ = "receipts"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(50), nullable=False, unique=True, index=True)
    receipt_date = Column(Date, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    total_amount = Column(Numeric(16, 5), nullable=False)
    # Method the money was received with; CREDIT_BALANCE when no cash came in.
    method = Column(Enum(PaymentMethod), nullable=False)
    display_method = Column(String(60), nullable=False)
    reference = Column(String(500), nullable=True)
    invoice_summary = Column(Text, nullable=True)
    observations = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
