# backend/modules/orders/services/status_service.py

"""
Status and total derivation for raw order records.

Order records reach the console in several shapes: newer ones carry a
string ``status``, legacy ones a numeric ``currentStatusIndex``, some
neither; totals may be stored or have to be rebuilt from the items. The
functions here are the single boundary where a raw record becomes a
``DerivedOrder`` with an unambiguous status, total and date.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

from core.exceptions import ValidationError

from ..enums.order_enums import (
    CANCELED_STATUSES,
    COMPLETED_STATUSES,
    STATUS_LIFECYCLE,
    OrderStatus,
)

logger = logging.getLogger(__name__)

STATUS_BY_INDEX: Dict[int, str] = {
    index: status.value for index, status in enumerate(STATUS_LIFECYCLE)
}
DEFAULT_STATUS = OrderStatus.CONFIRMED.value

DATE_FIELDS = ("orderDate", "createdAt", "updatedAt")

# Epoch values below this are taken as seconds rather than milliseconds
_EPOCH_MS_THRESHOLD = 1e11


@dataclass
class DerivedOrder:
    """An order record after status/total/date resolution."""

    id: Optional[str]
    status: str
    total: float
    order_date: Optional[datetime]
    record: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status in COMPLETED_STATUSES

    @property
    def is_canceled(self) -> bool:
        return self.status in CANCELED_STATUSES

    @property
    def is_pending(self) -> bool:
        return not (self.is_completed or self.is_canceled)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_number(value: Any) -> float:
    """Best effort numeric coercion; anything unusable counts as 0."""
    if _is_number(value):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0


def derive_status(record: Mapping[str, Any]) -> str:
    """
    Resolve the status of a raw order record.

    A string ``status`` wins (lower-cased, otherwise untouched); then a
    numeric ``currentStatusIndex`` is looked up in the lifecycle table;
    anything else is ``confirmed``.
    """
    status = record.get("status")
    if isinstance(status, str):
        return status.lower()

    index = record.get("currentStatusIndex")
    if _is_number(index):
        if float(index).is_integer():
            return STATUS_BY_INDEX.get(int(index), DEFAULT_STATUS)
        return DEFAULT_STATUS

    return DEFAULT_STATUS


def items_subtotal(items: Any) -> float:
    """Sum of price x quantity, with a zero or missing quantity counted as 1."""
    if not isinstance(items, (list, tuple)):
        return 0.0
    subtotal = 0.0
    for item in items:
        if not isinstance(item, Mapping):
            continue
        price = _as_number(item.get("price"))
        quantity = _as_number(item.get("quantity"))
        subtotal += price * max(quantity, 1)
    return subtotal


def derive_total(record: Mapping[str, Any]) -> float:
    """Stored total when present and non-zero, otherwise rebuilt from items."""
    total = _as_number(record.get("total"))
    if total:
        return total
    return (
        items_subtotal(record.get("items"))
        + _as_number(record.get("delivery"))
        + _as_number(record.get("tax"))
    )


PRICED_FIELDS = ("items", "delivery", "tax")


def reconcile_total(record: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Keep the stored total consistent with a partial update.

    An explicit ``total`` must cover the item subtotals of the merged order.
    When items, delivery or tax change without a ``total``, the total is
    recomputed from the merged order and added to the patch.
    """
    merged = {**record, **patch}
    subtotal = items_subtotal(merged.get("items"))

    if "total" in patch:
        if _as_number(patch["total"]) < subtotal:
            raise ValidationError("Total cannot be less than the sum of item subtotals")
        return dict(patch)

    if any(name in patch for name in PRICED_FIELDS):
        total = subtotal + _as_number(merged.get("delivery")) + _as_number(merged.get("tax"))
        return {**patch, "total": total}

    return dict(patch)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Convert a stored timestamp to an aware UTC datetime.

    Accepts datetimes (Firestore returns a datetime subclass), epoch
    milliseconds or seconds, ISO-8601 strings and ``{"seconds": ...}``
    timestamp maps. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if _is_number(value):
        if not math.isfinite(value):
            return None
        seconds = value / 1000 if abs(value) >= _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parse_timestamp(parsed)

    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        if _is_number(seconds):
            nanos = value.get("nanoseconds", value.get("_nanoseconds", 0))
            return parse_timestamp(seconds + (_as_number(nanos) / 1e9))

    return None


def derive_order_date(record: Mapping[str, Any]) -> Optional[datetime]:
    """First parseable of orderDate, createdAt, updatedAt."""
    for field_name in DATE_FIELDS:
        parsed = parse_timestamp(record.get(field_name))
        if parsed is not None:
            return parsed
    return None


def derive_order(record: Mapping[str, Any], order_id: Optional[str] = None) -> DerivedOrder:
    """Resolve one raw record. Never raises on malformed input."""
    return DerivedOrder(
        id=order_id or record.get("id"),
        status=derive_status(record),
        total=derive_total(record),
        order_date=derive_order_date(record),
        record=dict(record),
    )


def derive_orders(records: Iterable[Mapping[str, Any]]) -> list:
    return [derive_order(record) for record in records]
