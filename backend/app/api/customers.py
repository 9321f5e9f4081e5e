"""Customer accounts, the service catalog and contracted services."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.crud.crud_customer import customer_crud
from backend.app.db.session import get_db
from backend.app.schemas.customer import (
    ContractCreate,
    ContractRead,
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
    StatusChangeRequest,
)
from backend.app.schemas.invoice import InvoiceRead
from backend.app.services import accounts
from backend.app.services.billing import list_unpaid_invoices

router = APIRouter(tags=["customers"])


@router.post("/customers", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
async def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    return customer_crud.create(db, obj_in=payload)


@router.get("/customers", response_model=List[CustomerRead])
async def list_customers(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return customer_crud.get_multi(db, skip=skip, limit=limit)


@router.get("/customers/{customer_id}", response_model=CustomerRead)
async def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return customer_crud.get_or_404(db, customer_id=customer_id)


@router.put("/customers/{customer_id}", response_model=CustomerRead)
async def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    return accounts.update_customer(db, customer_id, payload)


@router.post("/customers/{customer_id}/status", response_model=CustomerRead)
async def change_status(customer_id: int, payload: StatusChangeRequest, db: Session = Depends(get_db)):
    return accounts.change_account_status(db, customer_id, payload.status, payload.reason)


@router.post("/customers/{customer_id}/contracts", response_model=ContractRead, status_code=status.HTTP_201_CREATED)
async def contract_service(customer_id: int, payload: ContractCreate, db: Session = Depends(get_db)):
    return accounts.contract_service(db, customer_id, payload)


@router.post("/customers/{customer_id}/contracts/{contract_id}/terminate", response_model=ContractRead)
async def terminate_contract(customer_id: int, contract_id: int, db: Session = Depends(get_db)):
    return accounts.terminate_contract(db, customer_id, contract_id)


@router.get("/customers/{customer_id}/unpaid-invoices", response_model=List[InvoiceRead])
async def unpaid_invoices(customer_id: int, db: Session = Depends(get_db)):
    return list_unpaid_invoices(db, customer_id)


@router.post("/services", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
async def create_service(payload: ServiceCreate, db: Session = Depends(get_db)):
    return accounts.create_service(db, payload)


@router.get("/services", response_model=List[ServiceRead])
async def list_services(active: Optional[bool] = None, db: Session = Depends(get_db)):
    return accounts.list_services(db, active=active)


@router.put("/services/{service_id}", response_model=ServiceRead)
async def update_service(service_id: int, payload: ServiceUpdate, db: Session = Depends(get_db)):
    return accounts.update_service(db, service_id, payload)


@router.post("/services/{service_id}/deactivate", response_model=ServiceRead)
async def deactivate_service(service_id: int, db: Session = Depends(get_db)):
    return accounts.deactivate_service(db, service_id)


@router.post("/services/{service_id}/reactivate", response_model=ServiceRead)
async def reactivate_service(service_id: int, db: Session = Depends(get_db)):
    return accounts.reactivate_service(db, service_id)
