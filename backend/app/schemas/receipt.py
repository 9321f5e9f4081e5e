"""Receipt read views."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from backend.app.models.enums import PaymentMethod


class ReceiptLine(BaseModel):
    method: PaymentMethod
    invoice_id: Optional[int] = None
    # None for the surplus row of an overpayment.
    invoice_number: Optional[str] = None
    amount: Decimal


class ReceiptRead(BaseModel):
    number: str
    receipt_date: date
    total_amount: Decimal
    method: PaymentMethod
    display_method: str
    reference: Optional[str] = None
    invoice_summary: str
    invoice_ids: List[int]
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_tax_id: Optional[str] = None
    payment_ids: List[int]
    observations: Optional[str] = None
    breakdown: List[ReceiptLine]
