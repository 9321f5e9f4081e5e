"""Settlement and payment listing routes."""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.crud.crud_payment import payment_crud
from backend.app.db.session import get_db
from backend.app.models.enums import PaymentMethod
from backend.app.schemas.payment import ApplyCreditRequest, PaymentRead, SettlementRequest
from backend.app.schemas.receipt import ReceiptRead
from backend.app.services.payments import apply_credit_balance, settle_combined_payment
from backend.app.services.receipts import build_consolidated_receipt, build_payment_receipt

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/settle", response_model=ReceiptRead, status_code=status.HTTP_201_CREATED)
async def settle(payload: SettlementRequest, db: Session = Depends(get_db)):
    settlement = settle_combined_payment(
        db,
        payload.invoice_ids,
        payload.cash_amount,
        credit_amount=payload.credit_amount,
        method=payload.method,
        reference=payload.reference,
    )
    return build_consolidated_receipt(db, settlement.receipt_number)


@router.post("/apply-credit", response_model=ReceiptRead, status_code=status.HTTP_201_CREATED)
async def apply_credit(payload: ApplyCreditRequest, db: Session = Depends(get_db)):
    settlement = apply_credit_balance(db, payload.customer_id, payload.invoice_ids)
    return build_consolidated_receipt(db, settlement.receipt_number)


@router.get("", response_model=List[PaymentRead])
async def list_payments(
    customer_id: int | None = None,
    method: PaymentMethod | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    return payment_crud.get_multi(
        db, customer_id=customer_id, method=method, from_date=from_date, to_date=to_date, skip=skip, limit=limit
    )


@router.get("/{payment_id}/receipt", response_model=ReceiptRead)
async def get_payment_receipt(payment_id: int, db: Session = Depends(get_db)):
    return build_payment_receipt(db, payment_id)
