"""Billing service: individual invoice issuance, voiding and overdue refresh."""

import logging
from datetime import date, timedelta
from typing import List

from sqlalchemy.orm import Session

from backend.app.core.exceptions import ValidationError
from backend.app.core.settings import get_settings
from backend.app.core.time import today
from backend.app.crud.crud_customer import customer_crud
from backend.app.crud.crud_invoice import invoice_crud
from backend.app.db.session import transactional
from backend.app.models.billing_period import BillingPeriod
from backend.app.models.credit_note import CreditNote
from backend.app.models.customer import Customer
from backend.app.models.enums import InvoiceState, InvoiceType, TaxCondition
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_line import InvoiceLine
from backend.app.schemas.invoice import InvoiceCreate
from backend.app.schemas.invoice_line import InvoiceLineCreate
from backend.app.services.sequences import SequenceService

logger = logging.getLogger(__name__)


def series_for_type(invoice_type: InvoiceType) -> int:
    return get_settings().invoice_series[InvoiceType(invoice_type).value]


def build_line(item: InvoiceLineCreate) -> InvoiceLine:
    """Turn a requested item into an uncalculated line, prorating when it carries a period."""
    if item.period_start is None:
        return InvoiceLine(item.description, item.unit_price, item.quantity, item.tax_rate_category)
    if item.period_end is None:
        period = BillingPeriod.until_month_end(item.period_start)
    else:
        period = BillingPeriod(item.period_start, item.period_end)
    return InvoiceLine.create_prorated(item.description, item.unit_price, item.quantity, item.tax_rate_category, period)


def new_invoice(
    db: Session,
    customer: Customer,
    issue_date: date,
    due_date: date,
    period: date,
    sequences: SequenceService,
) -> Invoice:
    """Create an empty numbered invoice for ``customer``; the caller owns the transaction."""
    settings = get_settings()
    invoice_type = Invoice.determine_invoice_type(
        TaxCondition(settings.issuer_tax_condition), customer.tax_condition
    )
    series = series_for_type(invoice_type)
    number = sequences.next_invoice_number(series, invoice_crud.last_number(db, series=series))
    invoice = Invoice(series, number, customer, issue_date, due_date, period, invoice_type)
    invoice.validate_customer_active()
    invoice.validate_dates()
    return invoice


def issue_invoice(db: Session, request: InvoiceCreate) -> Invoice:
    with transactional(db, "Invoice issuance"):
        customer = customer_crud.get_or_404(db, customer_id=request.customer_id)
        if not request.items:
            raise ValidationError("Cannot issue an invoice without items")

        issue_date = request.issue_date or today()
        due_date = issue_date + timedelta(days=get_settings().invoice_due_days)
        invoice = new_invoice(db, customer, issue_date, due_date, request.period or issue_date, SequenceService(db))

        for item in request.items:
            invoice.add_line(build_line(item))
        if request.discount_percent is not None and request.discount_percent > 0:
            invoice.apply_discount(request.discount_percent, request.discount_reason)

        invoice_crud.save(db, invoice)
    db.refresh(invoice)
    logger.info(
        "Issued invoice %s (id=%s) for customer %s, total %s",
        invoice.formatted_number, invoice.id, customer.id, invoice.total,
    )
    return invoice


def void_invoice(db: Session, invoice_id: int, reason: str) -> CreditNote:
    with transactional(db, f"Void of invoice {invoice_id}"):
        invoice = invoice_crud.get_or_404(db, invoice_id=invoice_id)
        number = SequenceService(db).next_credit_note_number(invoice.series)
        credit_note = invoice.void(reason, number)
    db.refresh(credit_note)
    logger.info(
        "Voided invoice %s; credit note %s for %s",
        invoice.formatted_number, credit_note.formatted_number, credit_note.amount,
    )
    return credit_note


def refresh_overdue_invoices(db: Session, on: date | None = None) -> int:
    """Flag every open invoice past its due date as overdue; return how many changed."""
    with transactional(db, "Overdue refresh"):
        changed = sum(1 for invoice in invoice_crud.get_open(db) if invoice.refresh_overdue_status(on))
    if changed:
        logger.info("Marked %s invoices as overdue", changed)
    return changed


def get_invoice(db: Session, invoice_id: int, on: date | None = None) -> Invoice:
    invoice = invoice_crud.get_or_404(db, invoice_id=invoice_id)
    if invoice.refresh_overdue_status(on):
        db.commit()
        db.refresh(invoice)
    return invoice


def list_invoices(
    db: Session,
    customer_id: int | None = None,
    period: date | None = None,
    state: InvoiceState | None = None,
    skip: int = 0,
    limit: int = 50,
    on: date | None = None,
) -> List[Invoice]:
    invoices = invoice_crud.get_multi(db, customer_id=customer_id, period=period, state=state, skip=skip, limit=limit)
    if any([invoice.refresh_overdue_status(on) for invoice in invoices]):
        db.commit()
    return invoices


def list_unpaid_invoices(db: Session, customer_id: int, on: date | None = None) -> List[Invoice]:
    customer_crud.get_or_404(db, customer_id=customer_id)
    invoices = invoice_crud.get_unpaid_by_customer(db, customer_id=customer_id)
    if any([invoice.refresh_overdue_status(on) for invoice in invoices]):
        db.commit()
    return invoices
