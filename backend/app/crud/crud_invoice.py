"""Repository queries for invoices, credit notes and batches."""

from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError
from backend.app.core.time import first_of_month
from backend.app.models.enums import InvoiceState, PAYABLE_STATES
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_batch import InvoiceBatch


class CRUDInvoice:
    def get(self, db: Session, *, invoice_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id).first()

    def get_or_404(self, db: Session, *, invoice_id: int) -> Invoice:
        invoice = self.get(db, invoice_id=invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def get_customer_ids(self, db: Session, *, invoice_ids: Sequence[int]) -> List[int]:
        rows = db.query(Invoice.customer_id).filter(Invoice.id.in_(invoice_ids)).distinct().all()
        return sorted(row.customer_id for row in rows)

    def get_many_in_order(
        self, db: Session, *, invoice_ids: Sequence[int], for_update: bool = False
    ) -> List[Invoice]:
        """Return the invoices in the order of ``invoice_ids``; raise if any is missing."""
        query = db.query(Invoice).filter(Invoice.id.in_(invoice_ids))
        if for_update:
            query = query.with_for_update().populate_existing()
        found = {invoice.id: invoice for invoice in query.all()}
        missing = [invoice_id for invoice_id in invoice_ids if invoice_id not in found]
        if missing:
            raise NotFoundError(f"Invoices not found: {', '.join(str(i) for i in missing)}")
        return [found[invoice_id] for invoice_id in invoice_ids]

    def get_multi(
        self,
        db: Session,
        *,
        customer_id: int | None = None,
        period: date | None = None,
        state: InvoiceState | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Invoice]:
        query = db.query(Invoice)
        if customer_id is not None:
            query = query.filter(Invoice.customer_id == customer_id)
        if period is not None:
            query = query.filter(Invoice.period == first_of_month(period))
        if state is not None:
            query = query.filter(Invoice.state == state)
        return query.order_by(Invoice.issue_date.asc(), Invoice.id.asc()).offset(skip).limit(limit).all()

    def get_by_customer(self, db: Session, *, customer_id: int) -> List[Invoice]:
        return db.query(Invoice).filter(Invoice.customer_id == customer_id).order_by(Invoice.id.asc()).all()

    def get_by_period(self, db: Session, *, period: date) -> List[Invoice]:
        return db.query(Invoice).filter(Invoice.period == first_of_month(period)).order_by(Invoice.id.asc()).all()

    def get_unpaid_by_customer(self, db: Session, *, customer_id: int) -> List[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.customer_id == customer_id, Invoice.state.in_(PAYABLE_STATES))
            .order_by(Invoice.issue_date.asc(), Invoice.id.asc())
            .all()
        )

    def get_open(self, db: Session) -> List[Invoice]:
        return db.query(Invoice).filter(Invoice.state.in_([InvoiceState.PENDING, InvoiceState.PARTIALLY_PAID])).all()

    def last_number(self, db: Session, *, series: int) -> int:
        return db.query(func.coalesce(func.max(Invoice.number), 0)).filter(Invoice.series == series).scalar()

    def save(self, db: Session, invoice: Invoice) -> Invoice:
        db.add(invoice)
        return invoice


class CRUDInvoiceBatch:
    def get(self, db: Session, *, batch_id: int) -> Optional[InvoiceBatch]:
        return db.query(InvoiceBatch).filter(InvoiceBatch.id == batch_id).first()

    def get_or_404(self, db: Session, *, batch_id: int) -> InvoiceBatch:
        batch = self.get(db, batch_id=batch_id)
        if batch is None:
            raise NotFoundError(f"Invoice batch {batch_id} not found")
        return batch

    def get_active_for_period(self, db: Session, *, period: date) -> Optional[InvoiceBatch]:
        return (
            db.query(InvoiceBatch)
            .filter(InvoiceBatch.period == first_of_month(period), InvoiceBatch.voided.is_(False))
            .first()
        )

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 50) -> List[InvoiceBatch]:
        return db.query(InvoiceBatch).order_by(InvoiceBatch.executed_at.desc()).offset(skip).limit(limit).all()


invoice_crud = CRUDInvoice()
batch_crud = CRUDInvoiceBatch()
