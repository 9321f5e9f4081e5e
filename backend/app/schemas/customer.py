"""Customer account and service catalog schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.enums import AccountStatus, TaxCondition, TaxRateCategory


class CustomerCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    legal_name: str = Field(min_length=2, max_length=150)
    tax_id: str = Field(pattern=r"^\d{7,11}$")
    address: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=100)
    tax_condition: TaxCondition


class CustomerUpdate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    legal_name: str = Field(min_length=2, max_length=150)
    address: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=100)
    tax_condition: TaxCondition


class StatusChangeRequest(BaseModel):
    status: AccountStatus
    reason: str


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    tax_rate_category: TaxRateCategory = TaxRateCategory.R21


class ServiceUpdate(ServiceCreate):
    pass


class ServiceRead(ServiceCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool


class ContractCreate(BaseModel):
    service_id: int
    start_date: Optional[date] = None
    contracted_price: Optional[Decimal] = Field(default=None, ge=0)


class ContractRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: int
    contracted_price: Decimal
    tax_rate_category: TaxRateCategory
    start_date: date
    end_date: Optional[date] = None
    active: bool


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    legal_name: str
    tax_id: str
    address: Optional[str] = None
    email: Optional[str] = None
    tax_condition: TaxCondition
    status: AccountStatus
    credit_balance: Decimal
    contracts: List[ContractRead] = []
    created_at: datetime
