"""Receipt lookup by number and listing."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.schemas.receipt import ReceiptRead
from backend.app.services.receipts import build_consolidated_receipt, list_receipts

router = APIRouter(prefix="/receipts", tags=["receipts"])


@router.get("", response_model=List[ReceiptRead])
async def get_receipts(
    customer_id: Optional[int] = None,
    customer_name: Optional[str] = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    return list_receipts(db, customer_id=customer_id, customer_name=customer_name, skip=skip, limit=limit)


@router.get("/{number}", response_model=ReceiptRead)
async def get_receipt(number: str, db: Session = Depends(get_db)):
    return build_consolidated_receipt(db, number)
