# orders_analytics/domain/models.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .price import Price


class OrderState(str, Enum):
    """Order lifecycle states as stored by the commerce backend"""
    DRAFT = "draft"
    PLACED = "placed"
    VALIDATION = "validation"
    FULFILLMENT = "fulfillment"
    COMPLETED = "completed"
    CANCELED = "canceled"


class OrderTimestamp(str, Enum):
    """Which order timestamp a reporting window is applied to"""
    COMPLETED = "completed"
    CHANGED = "changed"


class ProductVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant_id: int
    sku: str
    title: str = ""
    price: Optional[Price] = None


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_item_id: int
    order_id: int
    purchased_variant_id: int
    quantity: int = Field(ge=0)
    unit_price: Price

    @property
    def total_price(self) -> Price:
        return self.unit_price.multiply(self.quantity)


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: int
    state: OrderState
    user_id: int
    completed_at: Optional[datetime] = None
    changed_at: datetime
    total_price: Optional[Price] = None
    items: List[OrderItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _completed_needs_timestamp(self) -> "Order":
        if self.state == OrderState.COMPLETED and self.completed_at is None:
            raise ValueError(f"Completed order {self.order_id} has no completion timestamp")
        return self

    def timestamp(self, which: OrderTimestamp) -> Optional[datetime]:
        if which == OrderTimestamp.CHANGED:
            return self.changed_at
        return self.completed_at
