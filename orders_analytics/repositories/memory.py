# orders_analytics/repositories/memory.py
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from orders_analytics.domain.models import Order, ProductVariant
from .base import AnalyticsStores, OrderCriteria, VariantTally

logger = logging.getLogger(__name__)


class InMemoryOrderStore:
    """
    Orders held in a dict keyed by order_id.

    Serves as both the order repository and the item-join aggregate surface,
    since every order already carries its items.
    """

    def __init__(self, orders: Iterable[Order] = ()):
        self._orders: Dict[int, Order] = {}
        for order in orders:
            self._orders[order.order_id] = order

    def _matching(self, criteria: OrderCriteria) -> List[Order]:
        return [o for o in self._orders.values() if criteria.matches(o)]

    def find_ids(self, criteria: OrderCriteria) -> List[int]:
        ids = [o.order_id for o in self._matching(criteria)]
        logger.debug("find_ids %s -> %d ids", criteria, len(ids))
        return ids

    def load_multiple(self, order_ids: Sequence[int]) -> List[Order]:
        # Unknown ids are skipped
        return [self._orders[i] for i in order_ids if i in self._orders]

    def count(self, criteria: OrderCriteria) -> int:
        return len(self._matching(criteria))

    def average_total(self, criteria: OrderCriteria, currency_code: str) -> Optional[Decimal]:
        amounts = [
            o.total_price.amount
            for o in self._matching(criteria)
            if o.total_price is not None and o.total_price.currency_code == currency_code
        ]
        if not amounts:
            return None
        return sum(amounts, Decimal(0)) / len(amounts)

    def top_variants(self, criteria: OrderCriteria, limit: int) -> List[VariantTally]:
        line_counts: Dict[int, int] = defaultdict(int)
        quantities: Dict[int, int] = defaultdict(int)
        for order in self._matching(criteria):
            for item in order.items:
                line_counts[item.purchased_variant_id] += 1
                quantities[item.purchased_variant_id] += item.quantity

        tallies = [
            VariantTally(variant_id=v, line_count=line_counts[v], quantity=q)
            for v, q in quantities.items()
        ]
        # sort is stable: equal sums keep first-seen order
        tallies.sort(key=lambda t: t.quantity, reverse=True)
        return tallies[:limit]


class InMemoryVariantStore:
    def __init__(self, variants: Iterable[ProductVariant] = ()):
        self._variants: Dict[int, ProductVariant] = {v.variant_id: v for v in variants}

    def load(self, variant_id: int) -> Optional[ProductVariant]:
        return self._variants.get(variant_id)


def memory_stores(orders: Iterable[Order], variants: Iterable[ProductVariant]) -> AnalyticsStores:
    order_store = InMemoryOrderStore(orders)
    return AnalyticsStores(
        orders=order_store,
        order_items=order_store,
        variants=InMemoryVariantStore(variants),
    )
