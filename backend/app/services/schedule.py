"""Date arithmetic for recurring billing: due dates and next occurrences."""

from datetime import date, datetime, timedelta
from enum import Enum

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


class Frequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PaymentTerms(str, Enum):
    DUE_ON_RECEIPT = "due_on_receipt"
    NET_15 = "net_15"
    NET_30 = "net_30"
    NET_60 = "net_60"


PAYMENT_TERM_DAYS = {
    PaymentTerms.DUE_ON_RECEIPT: 0,
    PaymentTerms.NET_15: 15,
    PaymentTerms.NET_30: 30,
    PaymentTerms.NET_60: 60,
}

# relativedelta clamps to the last day of the target month (Jan 31 + 1 month -> Feb 28)
FREQUENCY_STEPS = {
    Frequency.WEEKLY: relativedelta(days=7),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.YEARLY: relativedelta(years=1),
}


def _coerce(enum_cls, value, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def due_date_for(payment_terms: PaymentTerms | str | None, anchor: date) -> date:
    """Return the due date for an invoice issued on ``anchor``.

    Unknown or missing terms fall back to due on receipt.
    """
    terms = _coerce(PaymentTerms, payment_terms, PaymentTerms.DUE_ON_RECEIPT)
    return anchor + timedelta(days=PAYMENT_TERM_DAYS[terms])


def next_occurrence(frequency: Frequency | str | None, anchor: date) -> date:
    """Return the next scheduled date after ``anchor``.

    ``anchor`` is the previous scheduled date, not the day the batch ran, so a
    late run does not shift the cadence. Unknown or missing frequencies fall
    back to monthly.
    """
    step = FREQUENCY_STEPS[_coerce(Frequency, frequency, Frequency.MONTHLY)]
    return anchor + step


def parse_schedule_date(value: date | str | None) -> date | None:
    """Parse a stored schedule date, dropping any time of day.

    Returns None when the value is empty or cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return isoparse(text).date()
    except (ValueError, OverflowError):
        return None
