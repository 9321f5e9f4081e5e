"""Invoice batch schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from backend.app.schemas.invoice import InvoiceRead


class BatchCreate(BaseModel):
    period: date
    due_date: date
    issue_date: Optional[date] = None


class BatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    period_label: str
    period: date
    executed_at: datetime
    due_date: date
    invoice_count: int
    total_amount: Decimal
    voided: bool
    voided_at: Optional[datetime] = None
    void_reason: Optional[str] = None
    voided_invoice_count: int
    active_total: Decimal


class BatchDetail(BatchRead):
    invoices: List[InvoiceRead] = []
