# orders_analytics/repositories/base.py
"""
Read-only contracts the analytics reporter needs from the commerce store.

The reporter never talks to a concrete backend; it receives an
AnalyticsStores bundle holding one implementation of each protocol below.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence

from orders_analytics.domain.models import Order, OrderState, OrderTimestamp, ProductVariant


@dataclass(frozen=True)
class OrderCriteria:
    """Shared order predicate: state, closed time window, optional owner."""
    start: datetime
    end: datetime
    user_id: Optional[int] = None
    state: OrderState = OrderState.COMPLETED
    timestamp: OrderTimestamp = OrderTimestamp.COMPLETED

    def matches(self, order: Order) -> bool:
        if order.state != self.state:
            return False
        ts = order.timestamp(self.timestamp)
        if ts is None or not (self.start <= ts <= self.end):
            return False
        # user_id 0 is treated as "no filter", like an empty uid
        if self.user_id and order.user_id != self.user_id:
            return False
        return True


@dataclass(frozen=True)
class VariantTally:
    """One row of the purchased-variant ranking."""
    variant_id: int
    line_count: int
    quantity: int


class OrderRepository(Protocol):
    def find_ids(self, criteria: OrderCriteria) -> List[int]:
        ...

    def load_multiple(self, order_ids: Sequence[int]) -> List[Order]:
        ...

    def count(self, criteria: OrderCriteria) -> int:
        ...

    def average_total(self, criteria: OrderCriteria, currency_code: str) -> Optional[Decimal]:
        """Unrounded mean of non-null totals in currency_code, None when no rows."""
        ...


class OrderItemAggregates(Protocol):
    def top_variants(self, criteria: OrderCriteria, limit: int) -> List[VariantTally]:
        """Variants ranked by summed quantity, highest first."""
        ...


class VariantRepository(Protocol):
    def load(self, variant_id: int) -> Optional[ProductVariant]:
        ...


@dataclass(frozen=True)
class AnalyticsStores:
    orders: OrderRepository
    order_items: OrderItemAggregates
    variants: VariantRepository
