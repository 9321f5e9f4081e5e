"""Invoice line schemas."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.enums import TaxRateCategory


class InvoiceLineBase(BaseModel):
    description: str = Field(min_length=1, max_length=255)
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    tax_rate_category: TaxRateCategory = TaxRateCategory.R21


class InvoiceLineCreate(InvoiceLineBase):
    # When set, unit_price is the monthly price and the line is prorated.
    period_start: Optional[date] = None
    period_end: Optional[date] = None


class InvoiceLineRead(InvoiceLineBase):
    id: int
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)
