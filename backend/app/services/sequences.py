"""Sequence numbers for invoices, credit notes and receipts.

Numbers are handed out from a counter row per key. ``next`` takes a
process-wide lock and a row lock (``SELECT ... FOR UPDATE``), so two requests
issuing in the same series never read the same last value. The counter update
is flushed into the caller's transaction: a rolled-back issuance gives its
number back.
"""

import logging
import threading

from sqlalchemy.orm import Session

from backend.app.models.sequence import SequenceCounter

logger = logging.getLogger(__name__)

_lock = threading.Lock()

RECEIPT_KEY = "receipt"


def invoice_key(series: int) -> str:
    return f"invoice:{series}"


def credit_note_key(series: int) -> str:
    return f"credit_note:{series}"


def format_receipt_number(value: int) -> str:
    return f"{value:08d}"


class SequenceService:
    def __init__(self, db: Session):
        self.db = db

    def next(self, key: str, floor: int = 0) -> int:
        """Return the next number for ``key``, never at or below ``floor``."""
        with _lock:
            counter = (
                self.db.query(SequenceCounter)
                .filter(SequenceCounter.key == key)
                .with_for_update()
                .first()
            )
            if counter is None:
                counter = SequenceCounter(key=key, last_value=0)
                self.db.add(counter)
            counter.last_value = max(counter.last_value or 0, floor) + 1
            self.db.flush()
            logger.debug("Sequence %s advanced to %s", key, counter.last_value)
            return counter.last_value

    def next_invoice_number(self, series: int, last_issued: int = 0) -> int:
        return self.next(invoice_key(series), floor=last_issued)

    def next_credit_note_number(self, series: int) -> int:
        return self.next(credit_note_key(series))

    def next_receipt_number(self) -> str:
        return format_receipt_number(self.next(RECEIPT_KEY))
