"""Billing period value object used for proration."""

import calendar
from dataclasses import dataclass, field
from datetime import date

from backend.app.core.exceptions import ValidationError

MONTH_NAMES = (
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
)


@dataclass(frozen=True)
class BillingPeriod:
    """A span of days inside a month; the month is taken from ``end``."""

    start: date
    end: date
    effective_days: int = field(init=False)
    days_in_month: int = field(init=False)

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise ValidationError("Billing period start and end dates are required")
        if self.end < self.start:
            raise ValidationError("Billing period end must be on or after its start")
        object.__setattr__(self, "effective_days", (self.end - self.start).days + 1)
        object.__setattr__(self, "days_in_month", calendar.monthrange(self.end.year, self.end.month)[1])

    @classmethod
    def until_month_end(cls, start: date) -> "BillingPeriod":
        last_day = calendar.monthrange(start.year, start.month)[1]
        return cls(start, start.replace(day=last_day))

    @property
    def is_partial(self) -> bool:
        return self.effective_days < self.days_in_month

    def describe(self) -> str:
        """e.g. ``"15 al 30 de Noviembre 2025"``."""
        return f"{self.start.day} al {self.end.day} de {MONTH_NAMES[self.end.month - 1]} {self.end.year}"

    def __str__(self) -> str:
        partial = " (partial)" if self.is_partial else ""
        return f"BillingPeriod[{self.start} to {self.end}, {self.effective_days}/{self.days_in_month} days{partial}]"
