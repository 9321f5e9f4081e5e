from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.customer import AccountStatusChange, Customer  # noqa: F401
from backend.app.models.service import ContractedService, Service  # noqa: F401
from backend.app.models.invoice_line import InvoiceLine  # noqa: F401
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.credit_note import CreditNote  # noqa: F401
from backend.app.models.invoice_batch import InvoiceBatch  # noqa: F401
from backend.app.models.payment import Payment, PaymentApplication  # noqa: F401
from backend.app.models.receipt import Receipt  # noqa: F401
from backend.app.models.sequence import SequenceCounter  # noqa: F401


def init_db() -> None:
    from backend.app.db.session import engine

    Base.metadata.create_all(bind=engine)
