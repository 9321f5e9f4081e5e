"""Repository queries for payments and receipts."""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from backend.app.models.customer import Customer
from backend.app.models.enums import PaymentMethod
from backend.app.models.payment import Payment
from backend.app.models.receipt import Receipt


class CRUDPayment:
    def get(self, db: Session, *, payment_id: int) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.id == payment_id).first()

    def get_by_receipt_number(self, db: Session, *, receipt_number: str) -> List[Payment]:
        return db.query(Payment).filter(Payment.receipt_number == receipt_number).order_by(Payment.id.asc()).all()

    def get_multi(
        self,
        db: Session,
        *,
        customer_id: int | None = None,
        method: PaymentMethod | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Payment]:
        query = db.query(Payment)
        if customer_id is not None:
            query = query.filter(Payment.customer_id == customer_id)
        if method is not None:
            query = query.filter(Payment.method == method)
        if from_date is not None:
            query = query.filter(Payment.payment_date >= from_date)
        if to_date is not None:
            query = query.filter(Payment.payment_date <= to_date)
        return query.order_by(Payment.id.desc()).offset(skip).limit(limit).all()

    def save(self, db: Session, payment: Payment) -> Payment:
        db.add(payment)
        return payment


class CRUDReceipt:
    def get_by_number(self, db: Session, *, number: str) -> Optional[Receipt]:
        return db.query(Receipt).filter(Receipt.number == number).first()

    def get_multi(
        self,
        db: Session,
        *,
        customer_id: int | None = None,
        customer_name: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Receipt]:
        query = db.query(Receipt)
        if customer_id is not None:
            query = query.filter(Receipt.customer_id == customer_id)
        if customer_name:
            query = query.join(Customer, Customer.id == Receipt.customer_id).filter(
                Customer.name.ilike(f"%{customer_name.strip()}%")
            )
        return query.order_by(Receipt.receipt_date.desc(), Receipt.id.desc()).offset(skip).limit(limit).all()

    def save(self, db: Session, receipt: Receipt) -> Receipt:
        db.add(receipt)
        return receipt


payment_crud = CRUDPayment()
receipt_crud = CRUDReceipt()
