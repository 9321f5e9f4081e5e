"""Enumerations shared by the billing models.

Lookup tables keyed by an enum must cover every member; a missing entry is
reported at import time instead of surfacing as a KeyError mid-invoice.
"""

import enum
from decimal import Decimal


class TaxRateCategory(str, enum.Enum):
    R21 = "R21"
    R10_5 = "R10_5"
    R27 = "R27"
    R2_5 = "R2_5"
    EXEMPT = "EXEMPT"


TAX_RATES = {
    TaxRateCategory.R21: Decimal("0.21"),
    TaxRateCategory.R10_5: Decimal("0.105"),
    TaxRateCategory.R27: Decimal("0.27"),
    TaxRateCategory.R2_5: Decimal("0.025"),
    TaxRateCategory.EXEMPT: Decimal("0"),
}


def tax_rate(category: TaxRateCategory) -> Decimal:
    """Return the decimal rate for a category (0.21 for R21)."""
    return TAX_RATES[TaxRateCategory(category)]


class TaxCondition(str, enum.Enum):
    REGISTERED = "REGISTERED"
    MONOTRIBUTO = "MONOTRIBUTO"
    EXEMPT = "EXEMPT"
    CONSUMER = "CONSUMER"


class InvoiceType(str, enum.Enum):
    A = "A"
    B = "B"
    C = "C"


class InvoiceState(str, enum.Enum):
    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    VOIDED = "VOIDED"


PAYABLE_STATES = (InvoiceState.PENDING, InvoiceState.PARTIALLY_PAID, InvoiceState.OVERDUE)


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    TRANSFER = "TRANSFER"
    CARD = "CARD"
    CREDIT_BALANCE = "CREDIT_BALANCE"


class AccountStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CLOSED = "CLOSED"


def _check_complete(table: dict, members: type[enum.Enum]) -> None:
    missing = [member.name for member in members if member not in table]
    if missing:
        raise RuntimeError(f"{members.__name__} lookup table is missing: {', '.join(missing)}")


_check_complete(TAX_RATES, TaxRateCategory)
