"""Payment and settlement schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.enums import PaymentMethod


class SettlementRequest(BaseModel):
    invoice_ids: List[int] = Field(min_length=1)
    cash_amount: Decimal = Field(default=Decimal("0.00"), max_digits=16, decimal_places=5)
    credit_amount: Decimal = Field(default=Decimal("0.00"), max_digits=16, decimal_places=5)
    method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = Field(default=None, max_length=500)


class ApplyCreditRequest(BaseModel):
    customer_id: int
    invoice_ids: List[int] = Field(min_length=1)


class PaymentApplicationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_id: int
    invoice_id: int
    applied_amount: Decimal
    applied_at: datetime


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: Optional[int] = None
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    payment_date: date
    receipt_number: Optional[str] = None
    created_at: datetime
