"""Billable service catalog and the services contracted by each customer."""

from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.money import to_decimal
from backend.app.core.time import today, utc_now
from backend.app.db.base_class import Base
from backend.app.models.enums import TaxRateCategory


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    tax_rate_category = Column(Enum(TaxRateCategory), nullable=False, default=TaxRateCategory.R21)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    contracts = relationship("ContractedService", viewonly=True)

    def update(self, name: str, description: str | None, price: Decimal, tax_rate_category: TaxRateCategory) -> None:
        if not (name or "").strip():
            raise ValidationError("Service name is required")
        if price is None or to_decimal(price) < 0:
            raise ValidationError("Service price cannot be negative")
        self.name = name.strip()
        self.description = description
        self.price = to_decimal(price)
        self.tax_rate_category = TaxRateCategory(tax_rate_category)
        # Active contracts follow the catalog price; invoices already issued keep theirs.
        for contract in self.contracts:
            if contract.active:
                contract.contracted_price = self.price

    def deactivate(self) -> None:
        if not self.active:
            raise StateError(f"Service '{self.name}' is already inactive")
        self.active = False

    def reactivate(self) -> None:
        if self.active:
            raise StateError(f"Service '{self.name}' is already active")
        self.active = True


class ContractedService(Base):
    __tablename__ = "contracted_services"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    # Copied from the catalog at contract time; only catalog price updates reach active contracts.
    contracted_price = Column(Numeric(12, 2), nullable=False)
    tax_rate_category = Column(Enum(TaxRateCategory), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    service = relationship("Service")

    def terminate(self, end_date=None) -> None:
        self.active = False
        self.end_date = end_date or today()
