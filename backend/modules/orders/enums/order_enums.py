from enum import Enum


class OrderStatus(str, Enum):
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    ON_THE_WAY = "on-the-way"
    COMPLETED = "completed"
    CANCELED = "canceled"


# Position in this tuple is the legacy ``currentStatusIndex``
STATUS_LIFECYCLE = (
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.ON_THE_WAY,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELED,
)

# Spellings found in older records
COMPLETED_STATUSES = frozenset({OrderStatus.COMPLETED.value, "delivered"})
CANCELED_STATUSES = frozenset({OrderStatus.CANCELED.value, "cancelled"})


class OrderSource(str, Enum):
    REALTIME = "realtime"
    DOCUMENTS = "documents"
