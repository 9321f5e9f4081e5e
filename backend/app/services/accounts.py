"""Customer account operations: details, status changes, the service catalog and contracts."""

import logging
from typing import List

from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError, StateError, ValidationError
from backend.app.crud.crud_customer import customer_crud, service_crud
from backend.app.db.session import transactional
from backend.app.models.customer import Customer
from backend.app.models.enums import AccountStatus
from backend.app.models.service import ContractedService, Service
from backend.app.schemas.customer import ContractCreate, CustomerUpdate, ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


def update_customer(db: Session, customer_id: int, request: CustomerUpdate) -> Customer:
    with transactional(db, f"Update of customer {customer_id}"):
        customer = customer_crud.get_or_404(db, customer_id=customer_id)
        customer.update_details(
            request.name, request.legal_name, request.tax_condition, address=request.address, email=request.email
        )
    db.refresh(customer)
    logger.info("Customer %s details updated", customer.id)
    return customer


def change_account_status(db: Session, customer_id: int, new_status: AccountStatus, reason: str) -> Customer:
    with transactional(db, f"Status change of customer {customer_id}"):
        customer = customer_crud.get_or_404(db, customer_id=customer_id)
        change = customer.change_status(new_status, reason)
    db.refresh(customer)
    logger.info(
        "Customer %s status %s -> %s",
        customer.id, change.previous_status.value if change.previous_status else None, change.new_status.value,
    )
    return customer


def _ensure_unique_name(db: Session, name: str, service_id: int | None = None) -> None:
    existing = service_crud.get_by_name(db, name=name.strip())
    if existing is not None and existing.id != service_id:
        raise ValidationError(f"A service named '{name.strip()}' already exists")


def create_service(db: Session, request: ServiceCreate) -> Service:
    _ensure_unique_name(db, request.name)
    service = service_crud.create(db, obj_in=request)
    logger.info("Service %s '%s' created", service.id, service.name)
    return service


def list_services(db: Session, active: bool | None = None) -> List[Service]:
    return service_crud.get_multi(db, active=active)


def update_service(db: Session, service_id: int, request: ServiceUpdate) -> Service:
    with transactional(db, f"Update of service {service_id}"):
        service = service_crud.get_or_404(db, service_id=service_id)
        _ensure_unique_name(db, request.name, service_id=service.id)
        service.update(request.name, request.description, request.price, request.tax_rate_category)
    db.refresh(service)
    logger.info("Service %s updated, price %s", service.id, service.price)
    return service


def deactivate_service(db: Session, service_id: int) -> Service:
    """Withdraw a service from the catalog; existing contracts keep it."""
    with transactional(db, f"Deactivation of service {service_id}"):
        service = service_crud.get_or_404(db, service_id=service_id)
        service.deactivate()
    db.refresh(service)
    logger.info("Service %s deactivated", service.id)
    return service


def reactivate_service(db: Session, service_id: int) -> Service:
    with transactional(db, f"Reactivation of service {service_id}"):
        service = service_crud.get_or_404(db, service_id=service_id)
        service.reactivate()
    db.refresh(service)
    logger.info("Service %s reactivated", service.id)
    return service


def contract_service(db: Session, customer_id: int, request: ContractCreate) -> ContractedService:
    with transactional(db, f"Service contract for customer {customer_id}"):
        customer = customer_crud.get_or_404(db, customer_id=customer_id)
        if customer.status == AccountStatus.CLOSED:
            raise StateError(f"Customer {customer_id} account is closed")
        service = service_crud.get_or_404(db, service_id=request.service_id)
        if not service.active:
            raise StateError(f"Service '{service.name}' is not active")
        contract = customer.contract_service(service, request.start_date, request.contracted_price)
    db.refresh(contract)
    logger.info("Customer %s contracted service %s from %s", customer.id, service.id, contract.start_date)
    return contract


def terminate_contract(db: Session, customer_id: int, contract_id: int) -> ContractedService:
    with transactional(db, f"Contract termination for customer {customer_id}"):
        customer = customer_crud.get_or_404(db, customer_id=customer_id)
        contract = next((c for c in customer.contracts if c.id == contract_id), None)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found for customer {customer_id}")
        if not contract.active:
            raise StateError(f"Contract {contract_id} is already terminated")
        contract.terminate()
    db.refresh(contract)
    return contract
