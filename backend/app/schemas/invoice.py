"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.enums import InvoiceState, InvoiceType
from backend.app.schemas.invoice_line import InvoiceLineCreate, InvoiceLineRead


class InvoiceCreate(BaseModel):
    customer_id: int
    issue_date: Optional[date] = None
    period: Optional[date] = None
    items: List[InvoiceLineCreate] = Field(default_factory=list)
    discount_percent: Optional[Decimal] = None
    discount_reason: Optional[str] = None


class VoidRequest(BaseModel):
    reason: str


class CreditNoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    series: int
    number: int
    issue_date: date
    amount: Decimal
    reason: str
    invoice_type: InvoiceType


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    series: int
    number: int
    formatted_number: str
    customer_id: int
    batch_id: Optional[int] = None

    issue_date: date
    due_date: date
    period: date
    formatted_period: Optional[str] = None
    invoice_type: InvoiceType
    state: InvoiceState

    subtotal: Decimal
    discount_percent: Decimal
    discount_reason: Optional[str] = None
    discount_amount: Decimal
    tax_total: Decimal
    total: Decimal
    outstanding_balance: Decimal

    lines: List[InvoiceLineRead] = []
    credit_notes: List[CreditNoteRead] = []

    created_at: datetime
    updated_at: datetime
