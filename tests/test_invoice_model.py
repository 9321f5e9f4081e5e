from datetime import date
from decimal import Decimal

import pytest

from backend.app.core.exceptions import StateError, ValidationError
from backend.app.db.base import Base  # noqa: F401
from backend.app.models.customer import Customer
from backend.app.models.enums import AccountStatus, InvoiceState, InvoiceType, PaymentMethod, TaxCondition, TaxRateCategory
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_line import InvoiceLine
from backend.app.models.payment import Payment


def make_customer(status=AccountStatus.ACTIVE, condition=TaxCondition.REGISTERED):
    return Customer(
        name="Acme",
        legal_name="Acme SA",
        tax_id="30712345678",
        tax_condition=condition,
        status=status,
    )


def make_invoice(customer=None, price=Decimal("15000.00"), category=TaxRateCategory.R21):
    invoice = Invoice(
        1, 7, customer or make_customer(), date(2025, 11, 10), date(2025, 11, 20), date(2025, 11, 10), InvoiceType.A
    )
    if price is not None:
        invoice.add_line(InvoiceLine("Internet 100MB", price, 1, category))
    return invoice


def cash(amount):
    return Payment(Decimal(amount), PaymentMethod.CASH)


def test_single_line_invoice_totals():
    invoice = make_invoice()
    assert invoice.subtotal == Decimal("15000.00")
    assert invoice.tax_total == Decimal("3150.00")
    assert invoice.total == Decimal("18150.00")
    assert invoice.outstanding_balance == invoice.total
    assert invoice.state == InvoiceState.PENDING


def test_discount_applies_to_principal_and_tax_stays_on_full_subtotal():
    invoice = make_invoice()
    invoice.apply_discount(Decimal("10"), "volume")
    assert invoice.discount_amount == Decimal("1500.00")
    assert invoice.tax_total == Decimal("3150.00")
    assert invoice.total == Decimal("16650.00")
    assert invoice.outstanding_balance == Decimal("16650.00")
    assert invoice.discount_reason == "volume"


def test_discount_amount_rounds_half_up():
    invoice = make_invoice(price=Decimal("10.05"), category=TaxRateCategory.EXEMPT)
    invoice.apply_discount(Decimal("5"), "promo")
    # 10.05 * 5% = 0.5025
    assert invoice.discount_amount == Decimal("0.50")
    assert invoice.total == Decimal("9.55")


def test_totals_follow_each_added_line():
    invoice = make_invoice()
    invoice.add_line(InvoiceLine("TV", Decimal("1000.00"), 2, TaxRateCategory.R10_5))
    assert invoice.subtotal == Decimal("17000.00")
    assert invoice.tax_total == Decimal("3360.00")
    assert invoice.total == invoice.subtotal - invoice.discount_amount + invoice.tax_total
    assert len(invoice.lines) == 2


@pytest.mark.parametrize("percent", [Decimal("-1"), Decimal("100.01"), None])
def test_discount_out_of_range_is_rejected(percent):
    invoice = make_invoice()
    with pytest.raises(ValidationError):
        invoice.apply_discount(percent, "volume")


def test_discount_requires_reason():
    invoice = make_invoice()
    with pytest.raises(ValidationError):
        invoice.apply_discount(Decimal("10"), "  ")


def test_partial_then_full_payment():
    invoice = make_invoice()
    invoice.register_partial_payment(cash("5000"))
    assert invoice.state == InvoiceState.PARTIALLY_PAID
    assert invoice.outstanding_balance == Decimal("13150.00")

    application = invoice.register_full_payment(cash("13150"))
    assert application.applied_amount == Decimal("13150")
    assert invoice.state == InvoiceState.PAID
    assert invoice.outstanding_balance == 0
    assert invoice.amount_paid == invoice.total


def test_full_payment_must_match_outstanding_balance():
    invoice = make_invoice()
    with pytest.raises(ValidationError):
        invoice.register_full_payment(cash("100"))
    assert invoice.state == InvoiceState.PENDING
    assert invoice.applications == []


def test_payment_cannot_exceed_outstanding_balance():
    invoice = make_invoice()
    with pytest.raises(ValidationError):
        invoice.register_partial_payment(cash("18150.01"))


def test_paid_invoice_rejects_more_payments():
    invoice = make_invoice()
    invoice.register_full_payment(cash("18150"))
    with pytest.raises(StateError):
        invoice.register_partial_payment(cash("1"))


def test_overdue_invoice_accepts_payments():
    invoice = make_invoice()
    assert invoice.refresh_overdue_status(on=date(2025, 11, 21)) is True
    assert invoice.state == InvoiceState.OVERDUE
    invoice.register_partial_payment(cash("1000"))
    assert invoice.state == InvoiceState.PARTIALLY_PAID


def test_overdue_refresh_respects_due_date_and_state():
    invoice = make_invoice()
    assert invoice.refresh_overdue_status(on=date(2025, 11, 20)) is False
    assert invoice.state == InvoiceState.PENDING
    invoice.register_full_payment(cash("18150"))
    assert invoice.refresh_overdue_status(on=date(2026, 1, 1)) is False
    assert invoice.state == InvoiceState.PAID


def test_void_issues_credit_note_for_total():
    invoice = make_invoice()
    credit_note = invoice.void("Billing error", 3, issued_on=date(2025, 11, 12))
    assert invoice.state == InvoiceState.VOIDED
    assert credit_note.amount == invoice.total
    assert credit_note.series == invoice.series
    assert credit_note.number == 3
    assert credit_note.invoice_type == InvoiceType.A
    assert credit_note.formatted_number == "1-00000003"
    assert invoice.credit_notes == [credit_note]


def test_void_twice_is_rejected():
    invoice = make_invoice()
    invoice.void("Billing error", 1)
    assert invoice.can_be_voided() is False
    with pytest.raises(StateError):
        invoice.void("Again", 2)
    assert len(invoice.credit_notes) == 1


def test_void_with_payments_is_rejected():
    invoice = make_invoice()
    invoice.register_partial_payment(cash("100"))
    with pytest.raises(StateError):
        invoice.void("Billing error", 1)


def test_overdue_invoice_with_partial_payment_cannot_be_voided():
    invoice = make_invoice()
    invoice.register_partial_payment(cash("100"))
    invoice.state = InvoiceState.OVERDUE
    assert invoice.can_be_voided() is False


def test_void_requires_reason():
    invoice = make_invoice()
    with pytest.raises(ValidationError):
        invoice.void("", 1)
    assert invoice.state == InvoiceState.PENDING


def test_voided_invoice_rejects_payments_and_edits():
    invoice = make_invoice()
    invoice.void("Billing error", 1)
    with pytest.raises(StateError):
        invoice.register_partial_payment(cash("10"))
    with pytest.raises(StateError):
        invoice.add_line(InvoiceLine("TV", Decimal("10.00")))
    with pytest.raises(StateError):
        invoice.apply_discount(Decimal("5"), "late")


def test_totals_are_frozen_once_paid():
    invoice = make_invoice()
    invoice.register_partial_payment(cash("10"))
    with pytest.raises(StateError):
        invoice.calculate_totals()
    with pytest.raises(StateError):
        invoice.apply_discount(Decimal("5"), "late")


def test_credit_note_fields_are_write_once():
    credit_note = make_invoice().void("Billing error", 1)
    with pytest.raises(StateError):
        credit_note.amount = Decimal("1")


@pytest.mark.parametrize(
    "issuer, customer, expected",
    [
        (TaxCondition.REGISTERED, TaxCondition.REGISTERED, InvoiceType.A),
        (TaxCondition.REGISTERED, TaxCondition.CONSUMER, InvoiceType.B),
        (TaxCondition.REGISTERED, TaxCondition.MONOTRIBUTO, InvoiceType.B),
        (TaxCondition.REGISTERED, TaxCondition.EXEMPT, InvoiceType.B),
        (TaxCondition.MONOTRIBUTO, TaxCondition.REGISTERED, InvoiceType.C),
        (TaxCondition.EXEMPT, TaxCondition.CONSUMER, InvoiceType.C),
    ],
)
def test_invoice_type_from_tax_conditions(issuer, customer, expected):
    assert Invoice.determine_invoice_type(issuer, customer) == expected


def test_suspended_customer_cannot_be_invoiced():
    invoice = make_invoice(customer=make_customer(status=AccountStatus.SUSPENDED), price=None)
    with pytest.raises(StateError):
        invoice.validate_customer_active()


def test_due_date_must_follow_issue_date():
    invoice = Invoice(1, 1, make_customer(), date(2025, 11, 10), date(2025, 11, 10), date(2025, 11, 1), InvoiceType.A)
    with pytest.raises(ValidationError):
        invoice.validate_dates()


def test_invoice_requires_period():
    with pytest.raises(ValidationError):
        Invoice(1, 1, make_customer(), date(2025, 11, 10), date(2025, 11, 20), None, InvoiceType.A)


def test_display_helpers():
    invoice = make_invoice()
    assert invoice.formatted_number == "1-00000007"
    assert invoice.period == date(2025, 11, 1)
    assert invoice.formatted_period == "Noviembre 2025"
