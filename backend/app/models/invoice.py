"""Invoice aggregate: lines, totals, discount, payment state and voiding.

Monetary invariant kept by every mutation below::

    total == (subtotal - discount_amount) + tax_total

Tax is computed on the undiscounted subtotal; the discount only reduces the
principal. ``outstanding_balance`` starts at ``total`` and afterwards only
moves down through payment registration.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.money import ZERO, round_half_up, to_decimal
from backend.app.core.time import first_of_month, today, utc_now
from backend.app.db.base_class import Base
from backend.app.models.billing_period import MONTH_NAMES
from backend.app.models.credit_note import CreditNote
from backend.app.models.enums import InvoiceState, InvoiceType, PAYABLE_STATES, TaxCondition
from backend.app.models.invoice_line import InvoiceLine
from backend.app.models.payment import Payment, PaymentApplication


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("series", "number", name="uq_invoices_series_number"),)

    id = Column(Integer, primary_key=True, index=True)
    series = Column(Integer, nullable=False)
    number = Column(Integer, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    batch_id = Column(Integer, ForeignKey("invoice_batches.id"), nullable=True, index=True)

    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    period = Column(Date, nullable=False, index=True)
    invoice_type = Column(Enum(InvoiceType), nullable=False)
    state = Column(Enum(InvoiceState), nullable=False, default=InvoiceState.PENDING)

    subtotal = Column(Numeric(16, 5), nullable=False, default=ZERO)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=ZERO)
    discount_reason = Column(String(255), nullable=True)
    tax_total = Column(Numeric(16, 5), nullable=False, default=ZERO)
    total = Column(Numeric(16, 5), nullable=False, default=ZERO)
    outstanding_balance = Column(Numeric(16, 5), nullable=False, default=ZERO)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    customer = relationship("Customer")
    lines = relationship("InvoiceLine", cascade="all, delete-orphan", order_by="InvoiceLine.id")
    credit_notes = relationship("CreditNote", cascade="all, delete-orphan", order_by="CreditNote.id")
    applications = relationship("PaymentApplication", cascade="all, delete-orphan", order_by="PaymentApplication.id")

    def __init__(self, series, number, customer, issue_date, due_date, period, invoice_type, **kwargs):
        if period is None:
            raise ValidationError("Invoice period is required")
        if customer is not None:
            kwargs["customer"] = customer
        super().__init__(
            series=series,
            number=number,
            issue_date=issue_date,
            due_date=due_date,
            period=first_of_month(period),
            invoice_type=InvoiceType(invoice_type),
            state=InvoiceState.PENDING,
            subtotal=ZERO,
            discount_percent=ZERO,
            discount_reason=None,
            tax_total=ZERO,
            total=ZERO,
            outstanding_balance=ZERO,
            **kwargs,
        )

    # --- lines and totals ---

    def add_line(self, line: InvoiceLine) -> None:
        if line is None:
            raise ValidationError("Invoice line cannot be None")
        self._ensure_editable()
        line.calculate()
        self.lines.append(line)
        self.calculate_totals()

    def calculate_subtotal(self) -> Decimal:
        self.subtotal = sum((to_decimal(line.subtotal) for line in self.lines), ZERO)
        return self.subtotal

    def calculate_tax_total(self) -> Decimal:
        self.tax_total = sum((to_decimal(line.tax_amount) for line in self.lines), ZERO)
        return self.tax_total

    @property
    def discount_amount(self) -> Decimal:
        percent = to_decimal(self.discount_percent)
        if percent <= 0:
            return ZERO
        return round_half_up(to_decimal(self.subtotal) * percent / Decimal(100), 2)

    def calculate_total(self) -> Decimal:
        self.total = (to_decimal(self.subtotal) - self.discount_amount) + to_decimal(self.tax_total)
        return self.total

    def calculate_totals(self) -> None:
        """Full recompute; only valid while no payment has been registered."""
        self._ensure_editable()
        self.calculate_subtotal()
        self.calculate_tax_total()
        self.calculate_total()
        self.outstanding_balance = self.total

    def apply_discount(self, percent, reason: str) -> None:
        if percent is None:
            raise ValidationError("Discount percent is required")
        percent = to_decimal(percent)
        if percent < 0 or percent > 100:
            raise ValidationError("Discount percent must be between 0 and 100")
        if reason is None or not reason.strip():
            raise ValidationError("A reason is required to apply a discount")
        self._ensure_editable()
        self.discount_percent = percent
        self.discount_reason = reason.strip()
        self.calculate_total()
        self.outstanding_balance = self.total

    def _ensure_editable(self) -> None:
        if self.state == InvoiceState.VOIDED:
            raise StateError(f"Invoice {self.formatted_number} is voided")
        if self.has_payments():
            raise StateError(f"Invoice {self.formatted_number} already has payments registered")

    # --- state ---

    @property
    def amount_paid(self) -> Decimal:
        return sum((to_decimal(app.applied_amount) for app in self.applications), ZERO)

    def has_payments(self) -> bool:
        return any(to_decimal(app.applied_amount) > 0 for app in self.applications)

    @property
    def is_payable(self) -> bool:
        return self.state in PAYABLE_STATES and to_decimal(self.outstanding_balance) > 0

    def refresh_overdue_status(self, on: date | None = None) -> bool:
        """Move a payable invoice past its due date to OVERDUE.

        Returns True when the state changed.
        """
        if self.state not in (InvoiceState.PENDING, InvoiceState.PARTIALLY_PAID):
            return False
        check_date = on or today()
        if self.due_date is not None and self.due_date < check_date and to_decimal(self.outstanding_balance) > 0:
            self.state = InvoiceState.OVERDUE
            return True
        return False

    def register_full_payment(self, payment: Payment) -> PaymentApplication:
        return self._register_payment(payment, full=True)

    def register_partial_payment(self, payment: Payment) -> PaymentApplication:
        return self._register_payment(payment, full=False)

    def _register_payment(self, payment: Payment, full: bool) -> PaymentApplication:
        if payment is None:
            raise ValidationError("Payment cannot be None")
        if self.state == InvoiceState.VOIDED:
            raise StateError(f"Cannot register a payment on voided invoice {self.formatted_number}")
        if self.state == InvoiceState.PAID:
            raise StateError(f"Invoice {self.formatted_number} is already paid")
        amount = to_decimal(payment.amount)
        balance = to_decimal(self.outstanding_balance)
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        if full and amount != balance:
            raise ValidationError(
                f"Full payment of {amount} does not match the outstanding balance {balance}"
            )
        if amount > balance:
            raise ValidationError(f"Payment of {amount} exceeds the outstanding balance {balance}")

        application = PaymentApplication(payment=payment, applied_amount=amount, applied_at=utc_now())
        self.applications.append(application)
        self.outstanding_balance = balance - amount
        if self.outstanding_balance == 0:
            self.state = InvoiceState.PAID
        else:
            self.state = InvoiceState.PARTIALLY_PAID
        return application

    def can_be_voided(self) -> bool:
        if self.state in (InvoiceState.VOIDED, InvoiceState.PARTIALLY_PAID, InvoiceState.PAID):
            return False
        return not self.has_payments()

    def void(self, reason: str, credit_note_number: int, issued_on: date | None = None) -> CreditNote:
        """Void the invoice and return the credit note that reverses it."""
        if not self.can_be_voided():
            raise StateError(
                f"Invoice {self.formatted_number} cannot be voided in state {self.state.value}; "
                "only invoices without payments can be voided"
            )
        if reason is None or not reason.strip():
            raise ValidationError("A reason is required to void an invoice")
        self.state = InvoiceState.VOIDED
        credit_note = CreditNote(
            series=self.series,
            number=credit_note_number,
            issue_date=issued_on or today(),
            amount=self.total,
            reason=reason.strip(),
            invoice_type=self.invoice_type,
        )
        self.credit_notes.append(credit_note)
        return credit_note

    # --- issuance rules ---

    @staticmethod
    def determine_invoice_type(issuer_condition: TaxCondition, customer_condition: TaxCondition) -> InvoiceType:
        if TaxCondition(issuer_condition) == TaxCondition.REGISTERED:
            if TaxCondition(customer_condition) == TaxCondition.REGISTERED:
                return InvoiceType.A
            return InvoiceType.B
        # Simplified-regime and exempt issuers always issue type C.
        return InvoiceType.C

    def validate_customer_active(self) -> None:
        if self.customer is None:
            raise ValidationError("Invoice has no customer")
        if not self.customer.can_be_invoiced():
            raise StateError(
                f"Cannot invoice customer {self.customer.id}: account status is {self.customer.status.value}"
            )

    def validate_dates(self) -> None:
        if self.issue_date is None or self.due_date is None:
            raise ValidationError("Issue and due dates are required")
        if self.due_date <= self.issue_date:
            raise ValidationError(
                f"Due date must be after the issue date (issued {self.issue_date}, due {self.due_date})"
            )

    # --- display ---

    @property
    def formatted_number(self) -> str:
        return f"{self.series}-{(self.number or 0):08d}"

    @property
    def formatted_period(self) -> str | None:
        if self.period is None:
            return None
        return f"{MONTH_NAMES[self.period.month - 1]} {self.period.year}"
