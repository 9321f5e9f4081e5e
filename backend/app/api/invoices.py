"""Invoice routes: individual issuance, lookup and voiding."""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.enums import InvoiceState
from backend.app.schemas.invoice import CreditNoteRead, InvoiceCreate, InvoiceRead, VoidRequest
from backend.app.services import billing

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def issue_invoice(payload: InvoiceCreate, db: Session = Depends(get_db)):
    return billing.issue_invoice(db, payload)


@router.get("", response_model=List[InvoiceRead])
async def list_invoices(
    customer_id: int | None = None,
    period: date | None = None,
    state: InvoiceState | None = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    return billing.list_invoices(db, customer_id=customer_id, period=period, state=state, skip=skip, limit=limit)


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return billing.get_invoice(db, invoice_id)


@router.post("/{invoice_id}/void", response_model=CreditNoteRead)
async def void_invoice(invoice_id: int, payload: VoidRequest, db: Session = Depends(get_db)):
    return billing.void_invoice(db, invoice_id, payload.reason)
