"""Payment model and the junction rows applying a payment to invoices."""


from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.money import to_decimal
from backend.app.core.time import today, utc_now
from backend.app.db.base_class import Base
from backend.app.models.enums import PaymentMethod

MAX_REFERENCE_LENGTH = 500


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    amount = Column(Numeric(16, 5), nullable=False)
    method = Column(Enum(PaymentMethod), nullable=False)
    reference = Column(String(MAX_REFERENCE_LENGTH), nullable=True)
    payment_date = Column(Date, nullable=False)
    receipt_number = Column(String(50), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    applications = relationship("PaymentApplication", viewonly=True, order_by="PaymentApplication.id")

    def __init__(self, amount, method, reference=None, payment_date=None, **kwargs):
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        if method is None:
            raise ValidationError("Payment method is required")
        if reference is not None and len(reference) > MAX_REFERENCE_LENGTH:
            raise ValidationError(f"Payment reference cannot exceed {MAX_REFERENCE_LENGTH} characters")
        super().__init__(
            amount=amount,
            method=PaymentMethod(method),
            reference=reference,
            payment_date=payment_date or today(),
            **kwargs,
        )

    @validates("amount", "method")
    def _immutable(self, key, value):
        if getattr(self, key) is not None:
            raise StateError(f"Payment {key} cannot be changed after creation")
        return value


class PaymentApplication(Base):
    __tablename__ = "payment_applications"
    __table_args__ = (UniqueConstraint("payment_id", "invoice_id", name="uq_payment_applications_payment_invoice"),)

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(Integer, ForeignKey("payments.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    applied_amount = Column(Numeric(16, 5), nullable=False)
    applied_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    payment = relationship("Payment")
    invoice = relationship("Invoice", viewonly=True)
