"""Customer account model: tax condition, account status and credit balance."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.core.money import ZERO, to_decimal
from backend.app.core.time import today, utc_now
from backend.app.db.base_class import Base
from backend.app.models.enums import AccountStatus, TaxCondition
from backend.app.models.service import ContractedService, Service


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    legal_name = Column(String(150), nullable=False)
    tax_id = Column(String(11), nullable=False, unique=True, index=True)
    address = Column(String(200), nullable=True)
    email = Column(String(100), nullable=True)
    tax_condition = Column(Enum(TaxCondition), nullable=False)
    status = Column(Enum(AccountStatus), nullable=False, default=AccountStatus.ACTIVE)
    credit_balance = Column(Numeric(16, 5), nullable=False, default=ZERO)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    contracts = relationship("ContractedService", cascade="all, delete-orphan", order_by="ContractedService.id")
    status_changes = relationship("AccountStatusChange", cascade="all, delete-orphan", order_by="AccountStatusChange.id")

    def __init__(self, **kwargs):
        kwargs.setdefault("status", AccountStatus.ACTIVE)
        kwargs.setdefault("credit_balance", ZERO)
        super().__init__(**kwargs)

    def update_details(
        self,
        name: str,
        legal_name: str,
        tax_condition: TaxCondition,
        address: str | None = None,
        email: str | None = None,
    ) -> None:
        """Replace the contact and tax details; status and tax id are left as they are."""
        if not (name or "").strip():
            raise ValidationError("Customer name is required")
        if not (legal_name or "").strip():
            raise ValidationError("Customer legal name is required")
        if tax_condition is None:
            raise ValidationError("Tax condition is required")
        self.name = name.strip()
        self.legal_name = legal_name.strip()
        self.tax_condition = TaxCondition(tax_condition)
        self.address = address.strip() if address else None
        self.email = email.strip() if email else None

    def can_be_invoiced(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def has_credit(self) -> bool:
        return to_decimal(self.credit_balance) > 0

    def debit_credit(self, amount: Decimal) -> None:
        """Draw ``amount`` from the account's credit balance."""
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationError("Credit amount to apply must be greater than zero")
        if not self.has_credit():
            raise StateError(f"Customer {self.id} has no credit balance to apply")
        if amount > to_decimal(self.credit_balance):
            raise ValidationError(
                f"Credit amount {amount} exceeds the available balance {to_decimal(self.credit_balance)}"
            )
        self.credit_balance = to_decimal(self.credit_balance) - amount

    def add_credit(self, amount: Decimal) -> None:
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationError("Credit amount must be greater than zero")
        self.credit_balance = to_decimal(self.credit_balance) + amount

    def change_status(self, new_status: AccountStatus, reason: str) -> "AccountStatusChange":
        if new_status is None:
            raise ValidationError("New account status is required")
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required to change the account status")
        if len(reason) < 5 or len(reason) > 500:
            raise ValidationError("Status change reason must be between 5 and 500 characters")
        new_status = AccountStatus(new_status)
        if new_status == self.status:
            raise ValidationError(f"Account status is already {new_status.value}")
        change = AccountStatusChange(previous_status=self.status, new_status=new_status, reason=reason)
        self.status_changes.append(change)
        self.status = new_status
        return change

    @property
    def active_contracts(self) -> list[ContractedService]:
        return [contract for contract in self.contracts if contract.active]

    def contract_service(
        self, service: Service, start_date: date | None = None, price: Decimal | None = None
    ) -> ContractedService:
        if service is None:
            raise ValidationError("Service is required")
        if any(contract.service is service or (service.id is not None and contract.service_id == service.id)
               for contract in self.active_contracts):
            raise ValidationError(f"Service '{service.name}' is already contracted for this customer")
        contract = ContractedService(
            service=service,
            contracted_price=to_decimal(price) if price is not None else service.price,
            tax_rate_category=service.tax_rate_category,
            start_date=start_date or today(),
            active=True,
        )
        self.contracts.append(contract)
        return contract


class AccountStatusChange(Base):
    __tablename__ = "account_status_changes"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    previous_status = Column(Enum(AccountStatus), nullable=True)
    new_status = Column(Enum(AccountStatus), nullable=False)
    reason = Column(String(500), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
