"""Receipt views built from payments and the receipt header of a settlement."""

from typing import List

from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError
from backend.app.core.money import ZERO, to_decimal
from backend.app.crud.crud_customer import customer_crud
from backend.app.crud.crud_payment import payment_crud, receipt_crud
from backend.app.models.enums import PaymentMethod
from backend.app.models.payment import Payment
from backend.app.models.receipt import Receipt
from backend.app.schemas.receipt import ReceiptLine, ReceiptRead
from backend.app.services.payments import summary_line
from backend.app.services.sequences import format_receipt_number


def _breakdown(payments: List[Payment]) -> List[ReceiptLine]:
    return [
        ReceiptLine(
            method=payment.method,
            invoice_id=application.invoice_id,
            invoice_number=application.invoice.formatted_number,
            amount=to_decimal(application.applied_amount),
        )
        for payment in payments
        for application in payment.applications
    ]


def _summary(payments: List[Payment]) -> tuple[str, List[int]]:
    """Applied amount per invoice, in first-seen order."""
    applied = {}
    invoices = {}
    for payment in payments:
        for application in payment.applications:
            invoices.setdefault(application.invoice_id, application.invoice)
            applied[application.invoice_id] = applied.get(application.invoice_id, ZERO) + to_decimal(
                application.applied_amount
            )
    lines = [summary_line(invoices[invoice_id], amount) for invoice_id, amount in applied.items()]
    return ", ".join(lines), list(applied)


def _customer_fields(db: Session, customer_id: int | None) -> dict:
    customer = customer_crud.get(db, customer_id=customer_id) if customer_id is not None else None
    if customer is None:
        return {"customer_id": customer_id}
    return {"customer_id": customer.id, "customer_name": customer.name, "customer_tax_id": customer.tax_id}


def build_payment_receipt(db: Session, payment_id: int) -> ReceiptRead:
    payment = payment_crud.get(db, payment_id=payment_id)
    if payment is None:
        raise NotFoundError(f"Payment {payment_id} not found")
    summary, invoice_ids = _summary([payment])
    return ReceiptRead(
        number=payment.receipt_number or format_receipt_number(payment.id),
        receipt_date=payment.payment_date,
        total_amount=to_decimal(payment.amount),
        method=payment.method,
        display_method=PaymentMethod(payment.method).value,
        reference=payment.reference,
        invoice_summary=summary,
        invoice_ids=invoice_ids,
        payment_ids=[payment.id],
        breakdown=_breakdown([payment]),
        **_customer_fields(db, payment.customer_id),
    )


def _consolidate(db: Session, header: Receipt) -> ReceiptRead:
    payments = payment_crud.get_by_receipt_number(db, receipt_number=header.number)
    paid = sum((to_decimal(payment.amount) for payment in payments), ZERO)
    total = to_decimal(header.total_amount)

    breakdown = _breakdown(payments)
    if total > paid:
        # Surplus credited to the account.
        breakdown.append(ReceiptLine(method=header.method, amount=total - paid))

    _, invoice_ids = _summary(payments)
    return ReceiptRead(
        number=header.number,
        receipt_date=header.receipt_date,
        total_amount=total,
        method=header.method,
        display_method=header.display_method,
        reference=header.reference,
        invoice_summary=header.invoice_summary or "",
        invoice_ids=invoice_ids,
        payment_ids=[payment.id for payment in payments],
        observations=header.observations,
        breakdown=breakdown,
        **_customer_fields(db, header.customer_id),
    )


def build_consolidated_receipt(db: Session, number: str) -> ReceiptRead:
    """Receipt for every payment sharing ``number``, plus any surplus credited."""
    header = receipt_crud.get_by_number(db, number=number)
    if header is None:
        raise NotFoundError(f"Receipt {number} not found")
    return _consolidate(db, header)


def list_receipts(
    db: Session,
    customer_id: int | None = None,
    customer_name: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> List[ReceiptRead]:
    """Receipts newest first, optionally for one customer or by partial customer name."""
    if customer_id is not None:
        customer_crud.get_or_404(db, customer_id=customer_id)
    headers = receipt_crud.get_multi(
        db, customer_id=customer_id, customer_name=customer_name, skip=skip, limit=limit
    )
    return [_consolidate(db, header) for header in headers]
