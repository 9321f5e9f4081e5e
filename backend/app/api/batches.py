"""Mass billing routes."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.crud.crud_invoice import batch_crud
from backend.app.db.session import get_db
from backend.app.schemas.batch import BatchCreate, BatchDetail, BatchRead
from backend.app.schemas.invoice import VoidRequest
from backend.app.services import batch_invoicing

router = APIRouter(prefix="/batches", tags=["batches"])


@router.post("", response_model=BatchDetail, status_code=status.HTTP_201_CREATED)
async def run_batch(payload: BatchCreate, db: Session = Depends(get_db)):
    return batch_invoicing.run_batch_invoicing(db, payload.period, payload.due_date, payload.issue_date)


@router.get("", response_model=List[BatchRead])
async def list_batches(skip: int = 0, limit: int = 50, db: Session = Depends(get_db)):
    return batch_crud.get_multi(db, skip=skip, limit=limit)


@router.get("/{batch_id}", response_model=BatchDetail)
async def get_batch(batch_id: int, db: Session = Depends(get_db)):
    return batch_invoicing.get_batch(db, batch_id)


@router.post("/{batch_id}/void", response_model=BatchDetail)
async def void_batch(batch_id: int, payload: VoidRequest, db: Session = Depends(get_db)):
    return batch_invoicing.void_batch(db, batch_id, payload.reason)
