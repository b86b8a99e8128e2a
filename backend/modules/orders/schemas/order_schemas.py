import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..enums.order_enums import OrderStatus
from ..services.status_service import (
    derive_order_date,
    derive_status,
    derive_total,
    parse_timestamp,
)


class CamelModel(BaseModel):
    """Persisted records use camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _new_item_id() -> str:
    return f"item_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


class OrderItem(CamelModel):
    id: Union[str, int] = Field(default_factory=_new_item_id)
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None


class OrderCreate(CamelModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[OrderItem] = Field(..., min_length=1)
    delivery_address: Optional[str] = None
    delivery: float = Field(0, ge=0)
    tax: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    total: Optional[float] = Field(None, ge=0)
    status: OrderStatus = OrderStatus.CONFIRMED
    order_date: Optional[str] = None

    @field_validator("customer_name")
    def validate_customer_name(cls, v):
        if not v.strip():
            raise ValueError("Customer name is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_total(self):
        if self.total is not None:
            subtotal = sum(item.price * item.quantity for item in self.items)
            if self.total < subtotal:
                raise ValueError("total cannot be less than the sum of item subtotals")
        return self

    def to_record(self) -> Dict[str, Any]:
        """Persisted shape, with the total and order date filled in."""
        record = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if self.total is None:
            record["total"] = derive_total(record)
        record.setdefault("orderDate", datetime.now(timezone.utc).isoformat())
        return record


class OrderUpdate(CamelModel):
    customer_name: Optional[str] = Field(None, min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    items: Optional[List[OrderItem]] = Field(None, min_length=1)
    delivery_address: Optional[str] = None
    delivery: Optional[float] = Field(None, ge=0)
    tax: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    total: Optional[float] = Field(None, ge=0)
    status: Optional[OrderStatus] = None
    order_date: Optional[str] = None

    @field_validator("customer_name", "items", "status")
    def reject_null(cls, v, info):
        # These fields may be left out of a patch but never cleared
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if info.field_name == "customer_name":
            if not v.strip():
                raise ValueError("Customer name is required")
            return v.strip()
        return v

    @model_validator(mode="after")
    def validate_total(self):
        if self.total is not None and self.items is not None:
            subtotal = sum(item.price * item.quantity for item in self.items)
            if self.total < subtotal:
                raise ValueError("total cannot be less than the sum of item subtotals")
        return self

    def to_patch(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderOut(CamelModel):
    id: str
    customer_name: str = "Unknown"
    customer_email: str = ""
    customer_phone: str = ""
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total: float
    status: str
    order_date: Optional[datetime] = None
    delivery_address: str = ""
    delivery: float = 0
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any], order_id: Optional[str] = None) -> "OrderOut":
        """Build the API shape of a raw record of any vintage."""
        items = record.get("items")
        delivery = record.get("delivery")
        return cls(
            id=str(order_id or record.get("id") or ""),
            customer_name=record.get("customerName") or "Unknown",
            customer_email=record.get("customerEmail") or "",
            customer_phone=record.get("customerPhone") or "",
            items=[item for item in items if isinstance(item, dict)] if isinstance(items, list) else [],
            total=derive_total(record),
            status=derive_status(record),
            order_date=derive_order_date(record),
            delivery_address=record.get("deliveryAddress") or "",
            delivery=delivery if isinstance(delivery, (int, float)) and not isinstance(delivery, bool) else 0,
            notes=record.get("notes") or "",
            created_at=parse_timestamp(record.get("createdAt")),
            updated_at=parse_timestamp(record.get("updatedAt")),
        )


class OrderDeleted(BaseModel):
    id: str
    deleted: bool = True

