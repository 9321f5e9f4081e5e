"""Invoice line model: one billed service with its tax computation."""

from decimal import Decimal

from sqlalchemy import Column, Enum, ForeignKey, Integer, Numeric, String

from backend.app.core.exceptions import ValidationError
from backend.app.core.money import ZERO, round_half_up, to_decimal
from backend.app.db.base_class import Base
from backend.app.models.billing_period import BillingPeriod
from backend.app.models.enums import TaxRateCategory, tax_rate


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)
    description = Column(String(255), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    tax_rate_category = Column(Enum(TaxRateCategory), nullable=False)
    subtotal = Column(Numeric(16, 5), nullable=False, default=ZERO)
    tax_amount = Column(Numeric(16, 5), nullable=False, default=ZERO)
    total = Column(Numeric(16, 5), nullable=False, default=ZERO)

    def __init__(self, description, unit_price, quantity=1, tax_rate_category=TaxRateCategory.R21, **kwargs):
        if not description or not str(description).strip():
            raise ValidationError("Line description is required")
        unit_price = to_decimal(unit_price)
        if unit_price < 0:
            raise ValidationError("Unit price cannot be negative")
        if quantity is None or int(quantity) < 1:
            raise ValidationError("Quantity must be at least 1")
        if tax_rate_category is None:
            raise ValidationError("Tax rate category is required")
        super().__init__(
            description=str(description).strip(),
            unit_price=unit_price,
            quantity=int(quantity),
            tax_rate_category=TaxRateCategory(tax_rate_category),
            subtotal=ZERO,
            tax_amount=ZERO,
            total=ZERO,
            **kwargs,
        )

    def calculate_subtotal(self) -> Decimal:
        self.subtotal = to_decimal(self.unit_price) * Decimal(self.quantity)
        return self.subtotal

    def calculate_tax(self) -> Decimal:
        self.tax_amount = to_decimal(self.subtotal) * tax_rate(self.tax_rate_category)
        return self.tax_amount

    def calculate_total(self) -> Decimal:
        self.total = to_decimal(self.subtotal) + to_decimal(self.tax_amount)
        return self.total

    def calculate(self) -> None:
        # Tax depends on the subtotal and the total on both.
        self.calculate_subtotal()
        self.calculate_tax()
        self.calculate_total()

    @classmethod
    def create_prorated(
        cls,
        base_description: str,
        monthly_price: Decimal,
        quantity: int,
        tax_rate_category: TaxRateCategory,
        period: BillingPeriod,
    ) -> "InvoiceLine":
        """Build an uncalculated line priced for the days of ``period`` only."""
        if period is None:
            raise ValidationError("Billing period is required for a prorated line")
        proportion = round_half_up(Decimal(period.effective_days) / Decimal(period.days_in_month), 4)
        prorated_price = round_half_up(to_decimal(monthly_price) * proportion, 2)
        description = f"{base_description} ({period.describe()})"
        return cls(description, prorated_price, quantity, tax_rate_category)
