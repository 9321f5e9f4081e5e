"""Payment allocation: settle one or more invoices from cash and credit balance.

A settlement draws first on the customer's credit balance and then on the
payment method, walking the invoices in the order given. Each invoice gets at
most two payments (one per funding source); whatever is left over after the
last invoice becomes credit for the customer. The whole settlement shares one
receipt number and runs in a single transaction.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Sequence

from sqlalchemy.orm import Session

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.money import ZERO, fits_amount_scale, format_amount, to_decimal
from backend.app.core.time import today
from backend.app.crud.crud_customer import customer_crud
from backend.app.crud.crud_invoice import invoice_crud
from backend.app.crud.crud_payment import payment_crud, receipt_crud
from backend.app.db.session import transactional
from backend.app.models.customer import Customer
from backend.app.models.enums import InvoiceState, PaymentMethod
from backend.app.models.invoice import Invoice
from backend.app.models.payment import Payment
from backend.app.models.receipt import Receipt
from backend.app.services.sequences import SequenceService

logger = logging.getLogger(__name__)


@dataclass
class Settlement:
    receipt_number: str
    customer_id: int
    payments: List[Payment] = field(default_factory=list)
    credit_applied: Decimal = ZERO
    surplus: Decimal = ZERO


def display_method(methods: Sequence[PaymentMethod]) -> str:
    """Label for the funding sources of a receipt, e.g. ``TRANSFER + CREDIT_BALANCE``."""
    methods = [PaymentMethod(method) for method in methods]
    others = [method for method in methods if method != PaymentMethod.CREDIT_BALANCE]
    if others and len(others) < len(methods):
        return f"{others[0].value} + {PaymentMethod.CREDIT_BALANCE.value}"
    return methods[0].value


def summary_line(invoice: Invoice, amount: Decimal) -> str:
    return f"Invoice {invoice.formatted_number} (${format_amount(amount)})"


def observations(credit_applied: Decimal, surplus: Decimal) -> str | None:
    parts = []
    if credit_applied > 0:
        parts.append(f"Credit balance applied: ${format_amount(credit_applied)}")
    if surplus > 0:
        parts.append(f"Surplus credited to account: ${format_amount(surplus)}")
    return ". ".join(parts) or None


def _lock_settlement(db: Session, invoice_ids: Sequence[int]) -> tuple[Customer, List[Invoice]]:
    """Lock the owning customer, then the invoices, and check they can be paid.

    The customer row is always locked before any invoice row so concurrent
    settlements for one customer serialize on it and read fresh balances.
    """
    unique_ids = list(dict.fromkeys(invoice_ids or []))
    if not unique_ids:
        raise ValidationError("At least one invoice is required")
    customer_ids = invoice_crud.get_customer_ids(db, invoice_ids=unique_ids)
    if len(customer_ids) > 1:
        raise ValidationError("All invoices in a settlement must belong to the same customer")
    customer = None
    if customer_ids:
        customer = customer_crud.get_or_404(db, customer_id=customer_ids[0], for_update=True)
    invoices = invoice_crud.get_many_in_order(db, invoice_ids=unique_ids, for_update=True)
    for invoice in invoices:
        if invoice.state == InvoiceState.VOIDED:
            raise StateError(f"Invoice {invoice.formatted_number} is voided and cannot be paid")
        if not invoice.is_payable:
            raise ValidationError(f"Invoice {invoice.formatted_number} has no outstanding balance")
    return customer, invoices


def _allocate(
    invoices: List[Invoice],
    customer: Customer,
    cash: Decimal,
    credit: Decimal,
    method: PaymentMethod,
    reference: str | None,
    payment_date: date,
    receipt_number: str,
) -> tuple[List[Payment], List[str], Decimal]:
    """Register payments against ``invoices``; return payments, summary lines and the leftover."""
    remaining = cash + credit
    credit_left = credit
    payments = []
    summary = []
    for invoice in invoices:
        if remaining <= 0:
            break
        applied = min(remaining, to_decimal(invoice.outstanding_balance))
        from_credit = min(applied, credit_left)
        portions = ((from_credit, PaymentMethod.CREDIT_BALANCE), (applied - from_credit, method))
        for amount, portion_method in portions:
            if amount <= 0:
                continue
            payment = Payment(
                amount,
                portion_method,
                reference,
                payment_date,
                customer_id=customer.id,
                receipt_number=receipt_number,
            )
            if amount == to_decimal(invoice.outstanding_balance):
                invoice.register_full_payment(payment)
            else:
                invoice.register_partial_payment(payment)
            payments.append(payment)
        summary.append(summary_line(invoice, applied))
        credit_left -= from_credit
        remaining -= applied
    return payments, summary, remaining


def settle_combined_payment(
    db: Session,
    invoice_ids: Sequence[int],
    cash_amount: Decimal,
    credit_amount: Decimal = ZERO,
    method: PaymentMethod = PaymentMethod.CASH,
    reference: str | None = None,
    payment_date: date | None = None,
) -> Settlement:
    cash = to_decimal(cash_amount)
    credit = to_decimal(credit_amount)
    if method is None:
        raise ValidationError("Payment method is required")
    method = PaymentMethod(method)
    if cash < 0 or credit < 0:
        raise ValidationError("Payment amounts cannot be negative")
    if cash + credit <= 0:
        raise ValidationError("The settlement amount must be greater than zero")
    if not (fits_amount_scale(cash) and fits_amount_scale(credit)):
        raise ValidationError("Payment amounts allow at most 5 decimal places")
    if method == PaymentMethod.CREDIT_BALANCE and cash > 0:
        raise ValidationError("Cash cannot be paid with the CREDIT_BALANCE method; use credit_amount instead")

    with transactional(db, "Combined settlement"):
        customer, invoices = _lock_settlement(db, invoice_ids)
        settlement = _settle(db, customer, invoices, cash, credit, method, reference, payment_date)

    logger.info(
        "Settled %s invoices for customer %s on receipt %s: cash %s, credit %s, surplus %s",
        len(invoices), settlement.customer_id, settlement.receipt_number, cash, credit, settlement.surplus,
    )
    return settlement


def _settle(
    db: Session,
    customer: Customer,
    invoices: List[Invoice],
    cash: Decimal,
    credit: Decimal,
    method: PaymentMethod,
    reference: str | None,
    payment_date: date | None,
) -> Settlement:
    """Allocate and persist a settlement; the caller holds the locks and the transaction."""
    if credit > 0:
        customer.debit_credit(credit)

    receipt_number = SequenceService(db).next_receipt_number()
    payment_date = payment_date or today()
    payments, summary, surplus = _allocate(
        invoices, customer, cash, credit, method, reference, payment_date, receipt_number
    )
    if surplus > 0:
        customer.add_credit(surplus)
    for payment in payments:
        payment_crud.save(db, payment)

    # Cash that only ended up as surplus has no payment row, so it is added here.
    methods = [payment.method for payment in payments]
    if cash > 0:
        methods.append(method)
    receipt_crud.save(
        db,
        Receipt(
            number=receipt_number,
            receipt_date=payment_date,
            customer_id=customer.id,
            total_amount=cash + credit,
            method=method if cash > 0 else PaymentMethod.CREDIT_BALANCE,
            display_method=display_method(methods),
            reference=reference,
            invoice_summary=", ".join(summary),
            observations=observations(credit, surplus),
        ),
    )
    return Settlement(
        receipt_number=receipt_number,
        customer_id=customer.id,
        payments=payments,
        credit_applied=credit,
        surplus=surplus,
    )


def apply_credit_balance(
    db: Session, customer_id: int, invoice_ids: Sequence[int], payment_date: date | None = None
) -> Settlement:
    """Settle invoices from the customer's credit balance alone.

    Applies as much credit as the invoices can absorb, never more than the
    available balance.
    """
    with transactional(db, f"Credit balance application for customer {customer_id}"):
        customer = customer_crud.get_or_404(db, customer_id=customer_id, for_update=True)
        if not customer.has_credit():
            raise StateError(f"Customer {customer_id} has no credit balance to apply")
        owner, invoices = _lock_settlement(db, invoice_ids)
        if owner is not customer:
            raise ValidationError(f"All invoices must belong to customer {customer_id}")
        due = sum((to_decimal(invoice.outstanding_balance) for invoice in invoices), ZERO)
        amount = min(to_decimal(customer.credit_balance), due)
        settlement = _settle(db, customer, invoices, ZERO, amount, PaymentMethod.CREDIT_BALANCE, None, payment_date)

    logger.info(
        "Applied credit %s for customer %s on receipt %s",
        amount, customer_id, settlement.receipt_number,
    )
    return settlement
