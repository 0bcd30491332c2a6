# app/utils/numbering.py
import datetime
import random
import string
from typing import Optional

from app.core.config import ORDER_NUMBER_PREFIX, INVOICE_NUMBER_PREFIX

# Both generators are short and random; uniqueness is enforced by the unique
# index on the column and callers regenerate on IntegrityError.
MAX_NUMBER_ATTEMPTS = 5

_BASE36 = string.digits + string.ascii_uppercase


def _date_part(now: Optional[datetime.datetime]) -> str:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return now.strftime("%Y%m%d")


def generate_order_number(now: Optional[datetime.datetime] = None, prefix: str = ORDER_NUMBER_PREFIX) -> str:
    """BAF-YYYYMMDD-NNNNN with a random 5-digit suffix."""
    suffix = random.randint(10000, 99999)
    return f"{prefix}-{_date_part(now)}-{suffix}"


def generate_invoice_number(now: Optional[datetime.datetime] = None, prefix: str = INVOICE_NUMBER_PREFIX) -> str:
    """INV-YYYYMMDD-XXXX with 4 uppercase base36 characters."""
    suffix = "".join(random.choices(_BASE36, k=4))
    return f"{prefix}-{_date_part(now)}-{suffix}"
