# orders_analytics/services/strategies.py
"""
Two ways of computing the same order metrics.

DatabaseAggregateStrategy pushes counting, averaging and ranking down to the
store. InMemoryStrategy loads the matching orders and reduces them in Python.
They differ on purpose in how they treat currencies and ties:

- average: the database path only averages orders already in the requested
  currency; the in-memory path sums every matching order and raises
  CurrencyMismatch as soon as one total is in another currency.
- ranking ties: the database path returns whatever the store orders first;
  the in-memory path keeps the variant seen first.
"""

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP
from enum import Enum
from typing import Dict, List

from orders_analytics.domain.price import CENT, Price
from orders_analytics.repositories.base import AnalyticsStores, OrderCriteria, VariantTally


class AnalyticsError(Exception):
    """Base exception for order analytics errors"""
    pass


class UnsupportedAggregationMode(AnalyticsError):
    """Raised for an unknown aggregation mode name"""
    pass


class AggregationMode(str, Enum):
    DATABASE = "database"
    IN_MEMORY = "in_memory"


class AnalyticsStrategy(ABC):
    mode: AggregationMode

    def __init__(self, stores: AnalyticsStores):
        self.stores = stores

    @abstractmethod
    def count_orders(self, criteria: OrderCriteria) -> int:
        pass

    @abstractmethod
    def average_order_value(self, criteria: OrderCriteria, currency_code: str) -> Price:
        pass

    @abstractmethod
    def rank_variants(self, criteria: OrderCriteria, limit: int) -> List[VariantTally]:
        pass


class DatabaseAggregateStrategy(AnalyticsStrategy):
    mode = AggregationMode.DATABASE

    def count_orders(self, criteria):
        return self.stores.orders.count(criteria)

    def average_order_value(self, criteria, currency_code):
        avg = self.stores.orders.average_total(criteria, currency_code)
        if not avg:
            return Price.zero(currency_code)
        return Price(amount=avg.quantize(CENT, rounding=ROUND_HALF_UP), currency_code=currency_code)

    def rank_variants(self, criteria, limit):
        return self.stores.order_items.top_variants(criteria, limit)


class InMemoryStrategy(AnalyticsStrategy):
    mode = AggregationMode.IN_MEMORY

    def _load_orders(self, criteria: OrderCriteria):
        ids = self.stores.orders.find_ids(criteria)
        if not ids:
            return []
        return self.stores.orders.load_multiple(ids)

    def count_orders(self, criteria):
        return len(self.stores.orders.find_ids(criteria))

    def average_order_value(self, criteria, currency_code):
        total = Price.zero(currency_code)
        orders = self._load_orders(criteria)
        if not orders:
            return total

        for order in orders:
            if order.total_price is not None:
                # raises CurrencyMismatch for a total in another currency
                total = total.add(order.total_price)

        return total.divide(len(orders))

    def rank_variants(self, criteria, limit):
        # dict keeps insertion order, so the first variant seen wins ties
        quantities: Dict[int, int] = {}
        line_counts: Dict[int, int] = {}
        for order in self._load_orders(criteria):
            for item in order.items:
                vid = item.purchased_variant_id
                quantities[vid] = quantities.get(vid, 0) + item.quantity
                line_counts[vid] = line_counts.get(vid, 0) + 1

        ranked = sorted(quantities.items(), key=lambda kv: kv[1], reverse=True)
        return [
            VariantTally(variant_id=vid, line_count=line_counts[vid], quantity=qty)
            for vid, qty in ranked[:limit]
        ]


STRATEGIES = {
    AggregationMode.DATABASE: DatabaseAggregateStrategy,
    AggregationMode.IN_MEMORY: InMemoryStrategy,
}


def get_strategy(mode: AggregationMode | str, stores: AnalyticsStores) -> AnalyticsStrategy:
    try:
        mode = AggregationMode(mode)
    except ValueError:
        raise UnsupportedAggregationMode(f"Unknown aggregation mode: {mode!r}") from None
    return STRATEGIES[mode](stores)
