"""Invoice batch: the invoices produced by one mass-billing run."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.money import ZERO, to_decimal
from backend.app.core.time import first_of_month, today, utc_now
from backend.app.db.base_class import Base
from backend.app.models.credit_note import CreditNote
from backend.app.models.enums import InvoiceState
from backend.app.models.invoice import Invoice


class InvoiceBatch(Base):
    __tablename__ = "invoice_batches"

    id = Column(Integer, primary_key=True, index=True)
    period_label = Column(String(50), nullable=False)
    period = Column(Date, nullable=False, index=True)
    executed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    due_date = Column(Date, nullable=False)
    invoice_count = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(16, 5), nullable=False, default=ZERO)
    voided = Column(Boolean, nullable=False, default=False)
    voided_at = Column(DateTime(timezone=True), nullable=True)
    void_reason = Column(String(500), nullable=True)

    invoices = relationship("Invoice", order_by="Invoice.id")

    def __init__(self, period_label: str, period: date, due_date: date, **kwargs):
        executed_at = kwargs.pop("executed_at", None) or utc_now()
        super().__init__(
            period_label=period_label,
            period=first_of_month(period),
            due_date=due_date,
            executed_at=executed_at,
            invoice_count=0,
            total_amount=ZERO,
            voided=False,
            **kwargs,
        )

    def add_invoice(self, invoice: Invoice) -> None:
        if invoice is None:
            raise ValidationError("Invoice cannot be None")
        self.invoices.append(invoice)
        self.invoice_count += 1
        self.total_amount = to_decimal(self.total_amount) + to_decimal(invoice.total)

    def can_be_voided(self) -> bool:
        if self.voided:
            return False
        for invoice in self.invoices:
            if invoice.state in (InvoiceState.PARTIALLY_PAID, InvoiceState.PAID) or invoice.has_payments():
                return False
        return True

    def void(self, reason: str, next_credit_note_number: Callable[[int], int], issued_on: date | None = None) -> list[CreditNote]:
        """Void the batch and every invoice in it, returning the credit notes issued.

        ``next_credit_note_number`` is called with an invoice series and must
        return the next credit note number for that series.
        """
        if not self.can_be_voided():
            raise StateError("Cannot void the batch: some of its invoices already have payments registered")
        if reason is None or not reason.strip():
            raise ValidationError("A reason is required to void a batch")
        reason = reason.strip()
        self.voided = True
        self.voided_at = utc_now()
        self.void_reason = reason
        issued_on = issued_on or today()
        credit_notes = []
        for invoice in self.invoices:
            if invoice.state == InvoiceState.VOIDED:
                continue
            credit_notes.append(invoice.void(reason, next_credit_note_number(invoice.series), issued_on))
        return credit_notes

    @property
    def active_invoices(self) -> list[Invoice]:
        return [invoice for invoice in self.invoices if invoice.state != InvoiceState.VOIDED]

    @property
    def voided_invoice_count(self) -> int:
        return sum(1 for invoice in self.invoices if invoice.state == InvoiceState.VOIDED)

    @property
    def active_total(self) -> Decimal:
        return sum((to_decimal(invoice.total) for invoice in self.active_invoices), ZERO)
