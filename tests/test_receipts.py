from datetime import date
from decimal import Decimal

import pytest

from backend.app.core.exceptions import NotFoundError
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.models.customer import Customer
from backend.app.models.enums import PaymentMethod, TaxCondition, TaxRateCategory
from backend.app.models.payment import Payment
from backend.app.models.receipt import Receipt
from backend.app.schemas.invoice import InvoiceCreate
from backend.app.schemas.invoice_line import InvoiceLineCreate
from backend.app.services.billing import issue_invoice
from backend.app.services.payments import settle_combined_payment
from backend.app.services.receipts import build_consolidated_receipt, build_payment_receipt, list_receipts


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_customer(db, credit="0"):
    customer = Customer(
        name="Acme",
        legal_name="Acme SA",
        tax_id="30712345678",
        tax_condition=TaxCondition.REGISTERED,
        credit_balance=Decimal(credit),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def create_invoice(db, customer, amount):
    payload = InvoiceCreate(
        customer_id=customer.id,
        issue_date=date(2025, 11, 10),
        items=[InvoiceLineCreate(description="Internet", unit_price=Decimal(amount), tax_rate_category=TaxRateCategory.EXEMPT)],
    )
    return issue_invoice(db, payload)


def test_consolidated_receipt_with_surplus():
    db = SessionLocal()
    try:
        customer = create_customer(db)
        first = create_invoice(db, customer, "5000.00")
        second = create_invoice(db, customer, "3000.00")
        settlement = settle_combined_payment(
            db, [first.id, second.id], Decimal("9000.00"), reference="Counter 2", payment_date=date(2025, 11, 12)
        )

        receipt = build_consolidated_receipt(db, settlement.receipt_number)

        assert receipt.number == "00000001"
        assert receipt.receipt_date == date(2025, 11, 12)
        assert receipt.total_amount == Decimal("9000.00")
        assert receipt.method == PaymentMethod.CASH
        assert receipt.display_method == "CASH"
        assert receipt.reference == "Counter 2"
        assert receipt.invoice_summary == "Invoice 1-00000001 ($5000.00), Invoice 1-00000002 ($3000.00)"
        assert receipt.invoice_ids == [first.id, second.id]
        assert receipt.customer_name == "Acme"
        assert receipt.customer_tax_id == "30712345678"
        assert receipt.observations == "Surplus credited to account: $1000.00"
        assert [(row.invoice_number, row.amount) for row in receipt.breakdown] == [
            ("1-00000001", Decimal("5000.00")),
            ("1-00000002", Decimal("3000.00")),
            (None, Decimal("1000.00")),
        ]
    finally:
        db.close()


def test_consolidated_receipt_combines_credit_and_method():
    db = SessionLocal()
    try:
        customer = create_customer(db, credit="2000.00")
        first = create_invoice(db, customer, "5000.00")
        settlement = settle_combined_payment(
            db, [first.id], Decimal("3000.00"), credit_amount=Decimal("2000.00"), method=PaymentMethod.TRANSFER
        )

        receipt = build_consolidated_receipt(db, settlement.receipt_number)

        assert receipt.total_amount == Decimal("5000.00")
        assert receipt.method == PaymentMethod.TRANSFER
        assert receipt.display_method == "TRANSFER + CREDIT_BALANCE"
        assert receipt.invoice_summary == "Invoice 1-00000001 ($5000.00)"
        assert receipt.observations == "Credit balance applied: $2000.00"
        assert [row.method for row in receipt.breakdown] == [PaymentMethod.CREDIT_BALANCE, PaymentMethod.TRANSFER]
        assert len(receipt.payment_ids) == 2

        header = db.query(Receipt).filter(Receipt.number == settlement.receipt_number).one()
        assert header.display_method == "TRANSFER + CREDIT_BALANCE"
        assert header.total_amount == Decimal("5000.00")
    finally:
        db.close()


def test_unknown_receipt_number():
    db = SessionLocal()
    try:
        with pytest.raises(NotFoundError):
            build_consolidated_receipt(db, "99999999")
    finally:
        db.close()


def test_single_payment_receipt_uses_settlement_number():
    db = SessionLocal()
    try:
        customer = create_customer(db)
        invoice = create_invoice(db, customer, "5000.00")
        settlement = settle_combined_payment(db, [invoice.id], Decimal("1200.00"), method=PaymentMethod.CARD)

        receipt = build_payment_receipt(db, settlement.payments[0].id)
        assert receipt.number == settlement.receipt_number
        assert receipt.display_method == "CARD"
        assert receipt.total_amount == Decimal("1200.00")
        assert receipt.invoice_summary == "Invoice 1-00000001 ($1200.00)"
    finally:
        db.close()


def test_single_payment_receipt_falls_back_to_payment_id():
    db = SessionLocal()
    try:
        customer = create_customer(db)
        invoice = create_invoice(db, customer, "5000.00")
        payment = Payment(Decimal("5000.00"), PaymentMethod.CASH, customer_id=customer.id)
        invoice.register_full_payment(payment)
        db.commit()

        receipt = build_payment_receipt(db, payment.id)
        assert receipt.number == f"{payment.id:08d}"
        assert receipt.breakdown[0].invoice_id == invoice.id
        with pytest.raises(NotFoundError):
            build_payment_receipt(db, 999)
    finally:
        db.close()


def test_credit_only_receipt_is_labelled_credit_balance():
    db = SessionLocal()
    try:
        customer = create_customer(db, credit="100.00")
        invoice = create_invoice(db, customer, "100.00")
        settlement = settle_combined_payment(db, [invoice.id], Decimal("0"), credit_amount=Decimal("100.00"))

        header = db.query(Receipt).filter(Receipt.number == settlement.receipt_number).one()
        assert header.method == PaymentMethod.CREDIT_BALANCE
        assert header.display_method == "CREDIT_BALANCE"

        receipt = build_consolidated_receipt(db, settlement.receipt_number)
        assert receipt.method == PaymentMethod.CREDIT_BALANCE
        assert receipt.display_method == "CREDIT_BALANCE"
        assert receipt.observations == "Credit balance applied: $100.00"
    finally:
        db.close()


def test_cash_that_only_becomes_surplus_keeps_its_method():
    db = SessionLocal()
    try:
        customer = create_customer(db, credit="100.00")
        invoice = create_invoice(db, customer, "100.00")
        settlement = settle_combined_payment(
            db, [invoice.id], Decimal("50.00"), credit_amount=Decimal("100.00"), method=PaymentMethod.TRANSFER
        )
        assert [p.method for p in settlement.payments] == [PaymentMethod.CREDIT_BALANCE]

        receipt = build_consolidated_receipt(db, settlement.receipt_number)

        assert receipt.total_amount == Decimal("150.00")
        assert receipt.method == PaymentMethod.TRANSFER
        assert receipt.display_method == "TRANSFER + CREDIT_BALANCE"
        assert [(row.method, row.amount) for row in receipt.breakdown] == [
            (PaymentMethod.CREDIT_BALANCE, Decimal("100.00")),
            (PaymentMethod.TRANSFER, Decimal("50.00")),
        ]
        assert receipt.observations == "Credit balance applied: $100.00. Surplus credited to account: $50.00"
        db.refresh(customer)
        assert customer.credit_balance == Decimal("50.00")
    finally:
        db.close()


def test_receipt_view_reads_the_stored_header():
    db = SessionLocal()
    try:
        customer = create_customer(db)
        invoice = create_invoice(db, customer, "5000.00")
        settlement = settle_combined_payment(db, [invoice.id], Decimal("5000.00"), reference="Counter 1")

        header = db.query(Receipt).filter(Receipt.number == settlement.receipt_number).one()
        header.reference = "Counter 1 / drawer 3"
        header.observations = "Paid at the branch"
        db.commit()

        receipt = build_consolidated_receipt(db, settlement.receipt_number)
        assert receipt.reference == "Counter 1 / drawer 3"
        assert receipt.observations == "Paid at the branch"
        assert receipt.invoice_summary == header.invoice_summary
    finally:
        db.close()


def test_list_receipts_all_and_by_customer():
    db = SessionLocal()
    try:
        acme = create_customer(db)
        other = Customer(
            name="Globex", legal_name="Globex SA", tax_id="30999999999", tax_condition=TaxCondition.REGISTERED
        )
        db.add(other)
        db.commit()
        first = create_invoice(db, acme, "5000.00")
        second = create_invoice(db, other, "3000.00")
        settle_combined_payment(db, [first.id], Decimal("5000.00"), payment_date=date(2025, 11, 12))
        settle_combined_payment(db, [second.id], Decimal("3000.00"), payment_date=date(2025, 11, 13))

        assert [receipt.number for receipt in list_receipts(db)] == ["00000002", "00000001"]
        by_customer = list_receipts(db, customer_id=acme.id)
        assert [(receipt.number, receipt.customer_name) for receipt in by_customer] == [("00000001", "Acme")]
        assert [receipt.number for receipt in list_receipts(db, customer_name="glob")] == ["00000002"]
        with pytest.raises(NotFoundError):
            list_receipts(db, customer_id=999)
    finally:
        db.close()
