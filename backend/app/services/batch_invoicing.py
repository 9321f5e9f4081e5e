"""Mass billing: one invoice per active customer for a billing month."""

import logging
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.time import first_of_month, today
from backend.app.crud.crud_customer import customer_crud
from backend.app.crud.crud_invoice import batch_crud
from backend.app.db.session import transactional
from backend.app.models.billing_period import BillingPeriod, MONTH_NAMES
from backend.app.models.invoice_batch import InvoiceBatch
from backend.app.models.invoice_line import InvoiceLine
from backend.app.models.service import ContractedService
from backend.app.services.billing import new_invoice
from backend.app.services.sequences import SequenceService

logger = logging.getLogger(__name__)


def period_label(period: date) -> str:
    return f"{MONTH_NAMES[period.month - 1]} {period.year}"


def lines_for_period(contracts: List[ContractedService], period: date) -> List[InvoiceLine]:
    """Price each active contract for the month starting at ``period``.

    Contracts starting after the first of the month are prorated from their
    start date; contracts starting after the month are left out.
    """
    month_end = BillingPeriod.until_month_end(period).end
    lines = []
    for contract in contracts:
        if not contract.active or contract.start_date > month_end:
            continue
        name = contract.service.name
        if contract.start_date > period:
            lines.append(
                InvoiceLine.create_prorated(
                    name,
                    contract.contracted_price,
                    1,
                    contract.tax_rate_category,
                    BillingPeriod(contract.start_date, month_end),
                )
            )
        else:
            lines.append(InvoiceLine(name, contract.contracted_price, 1, contract.tax_rate_category))
    return lines


def run_batch_invoicing(db: Session, period: date, due_date: date, issue_date: date | None = None) -> InvoiceBatch:
    period = first_of_month(period)
    with transactional(db, f"Batch invoicing for {period:%Y-%m}"):
        if batch_crud.get_active_for_period(db, period=period) is not None:
            raise StateError(f"Period {period_label(period)} has already been billed")
        issue_date = issue_date or today()
        if due_date is None or due_date <= issue_date:
            raise ValidationError("Batch due date must be after the issue date")

        batch = InvoiceBatch(period_label(period), period, due_date)
        sequences = SequenceService(db)
        for customer in customer_crud.get_active_with_services(db):
            lines = lines_for_period(customer.active_contracts, period)
            if not lines:
                continue
            invoice = new_invoice(db, customer, issue_date, due_date, period, sequences)
            for line in lines:
                invoice.add_line(line)
            batch.add_invoice(invoice)

        if batch.invoice_count == 0:
            raise StateError(f"No active customers with contracted services to bill for {period_label(period)}")
        db.add(batch)
    db.refresh(batch)
    logger.info(
        "Batch %s for %s issued %s invoices totalling %s",
        batch.id, batch.period_label, batch.invoice_count, batch.total_amount,
    )
    return batch


def get_batch(db: Session, batch_id: int, on: date | None = None) -> InvoiceBatch:
    batch = batch_crud.get_or_404(db, batch_id=batch_id)
    if any([invoice.refresh_overdue_status(on) for invoice in batch.invoices]):
        db.commit()
        db.refresh(batch)
    return batch


def void_batch(db: Session, batch_id: int, reason: str) -> InvoiceBatch:
    with transactional(db, f"Void of batch {batch_id}"):
        batch = batch_crud.get_or_404(db, batch_id=batch_id)
        credit_notes = batch.void(reason, SequenceService(db).next_credit_note_number)
    db.refresh(batch)
    logger.info("Voided batch %s; issued %s credit notes", batch.id, len(credit_notes))
    return batch
