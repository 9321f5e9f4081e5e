"""Counter rows behind invoice, credit note and receipt numbering."""

from sqlalchemy import Column, DateTime, Integer, String

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    key = Column(String(50), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
