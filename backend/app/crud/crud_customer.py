"""CRUD operations for customers and their contracted services."""

from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from backend.app.core.exceptions import NotFoundError
from backend.app.models.customer import Customer
from backend.app.models.enums import AccountStatus
from backend.app.models.service import ContractedService, Service
from backend.app.schemas.customer import CustomerCreate, ServiceCreate


class CRUDCustomer:
    def create(self, db: Session, *, obj_in: CustomerCreate) -> Customer:
        obj = Customer(**obj_in.model_dump())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, customer_id: int, for_update: bool = False) -> Optional[Customer]:
        query = db.query(Customer).filter(Customer.id == customer_id)
        if for_update:
            # Credit balance is read-modify-write inside settlements.
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_or_404(self, db: Session, *, customer_id: int, for_update: bool = False) -> Customer:
        customer = self.get(db, customer_id=customer_id, for_update=for_update)
        if customer is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Customer]:
        return db.query(Customer).order_by(Customer.id.asc()).offset(skip).limit(limit).all()

    def get_contracted_services(self, db: Session, *, customer_id: int) -> List[ContractedService]:
        return (
            db.query(ContractedService)
            .options(selectinload(ContractedService.service))
            .filter(ContractedService.customer_id == customer_id, ContractedService.active.is_(True))
            .order_by(ContractedService.id.asc())
            .all()
        )

    def get_active_with_services(self, db: Session) -> List[Customer]:
        return (
            db.query(Customer)
            .join(ContractedService, ContractedService.customer_id == Customer.id)
            .filter(Customer.status == AccountStatus.ACTIVE, ContractedService.active.is_(True))
            .options(selectinload(Customer.contracts).selectinload(ContractedService.service))
            .distinct()
            .order_by(Customer.id.asc())
            .all()
        )


class CRUDService:
    def create(self, db: Session, *, obj_in: ServiceCreate) -> Service:
        obj = Service(**obj_in.model_dump())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    def get_or_404(self, db: Session, *, service_id: int) -> Service:
        service = self.get(db, service_id=service_id)
        if service is None:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def get_by_name(self, db: Session, *, name: str) -> Optional[Service]:
        return db.query(Service).filter(Service.name == name).first()

    def get_multi(self, db: Session, *, active: bool | None = None, skip: int = 0, limit: int = 100) -> List[Service]:
        query = db.query(Service)
        if active is not None:
            query = query.filter(Service.active.is_(active))
        return query.order_by(Service.name.asc()).offset(skip).limit(limit).all()


customer_crud = CRUDCustomer()
service_crud = CRUDService()
