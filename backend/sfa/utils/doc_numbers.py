"""
Human-readable document numbers.

Numbers are timestamp based; two documents saved in the same millisecond
share a number.
"""
import random
import time
from datetime import date
from typing import Optional

ORDER_PREFIX = "ORD"
INVOICE_PREFIX = "INV"
COLLECTION_PREFIX = "COL"
BULK_UPLOAD_PREFIX = "BU"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def timestamp_number(prefix: str) -> str:
    return f"{prefix}-{_epoch_millis()}"


def order_number() -> str:
    return timestamp_number(ORDER_PREFIX)


def invoice_number() -> str:
    return timestamp_number(INVOICE_PREFIX)


def collection_number() -> str:
    return timestamp_number(COLLECTION_PREFIX)


def bulk_upload_reference(on_date: Optional[date] = None, rng: Optional[random.Random] = None) -> str:
    """BU-<YYYYMMDD>-<5 random digits>."""
    on_date = on_date or date.today()
    rng = rng or random
    return f"{BULK_UPLOAD_PREFIX}-{on_date.strftime('%Y%m%d')}-{rng.randint(10000, 99999)}"
