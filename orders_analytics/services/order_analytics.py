# orders_analytics/services/order_analytics.py
import logging
from datetime import datetime
from typing import List, Optional

from orders_analytics.core.config import Settings, get_settings
from orders_analytics.core.logging import setup_logging
from orders_analytics.domain.models import OrderTimestamp, ProductVariant
from orders_analytics.domain.price import Price
from orders_analytics.repositories.base import AnalyticsStores, OrderCriteria, VariantTally
from orders_analytics.repositories.postgres import postgres_stores
from .strategies import AggregationMode, get_strategy

logger = logging.getLogger(__name__)


class OrderAnalyticsReporter:
    """
    Order metrics over a closed reporting window.

    Every call re-queries the stores; nothing is cached between calls.
    Repository errors are propagated to the caller unchanged.
    """

    def __init__(
        self,
        stores: AnalyticsStores,
        mode: AggregationMode | str = AggregationMode.DATABASE,
        timestamp: OrderTimestamp | str = OrderTimestamp.COMPLETED,
        default_currency: str = "USD",
    ):
        self.stores = stores
        self.strategy = get_strategy(mode, stores)
        self.timestamp = OrderTimestamp(timestamp)
        self.default_currency = default_currency

    @classmethod
    def from_settings(cls, stores: AnalyticsStores, settings: Settings) -> "OrderAnalyticsReporter":
        return cls(
            stores,
            mode=settings.aggregation_mode,
            timestamp=settings.order_timestamp,
            default_currency=settings.default_currency,
        )

    @property
    def mode(self) -> AggregationMode:
        return self.strategy.mode

    def _criteria(self, start: datetime, end: datetime, user_id: Optional[int] = None) -> OrderCriteria:
        return OrderCriteria(start=start, end=end, user_id=user_id, timestamp=self.timestamp)

    def count_completed_orders(self, start: datetime, end: datetime, user_id: Optional[int] = None) -> int:
        count = self.strategy.count_orders(self._criteria(start, end, user_id))
        logger.info("Completed orders %s..%s user=%s mode=%s: %d",
                    start, end, user_id, self.mode.value, count)
        return count

    def average_order_value(
        self,
        start: datetime,
        end: datetime,
        currency_code: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Price:
        currency_code = (currency_code or self.default_currency).upper()
        aov = self.strategy.average_order_value(self._criteria(start, end, user_id), currency_code)
        logger.info("Average order value %s..%s user=%s mode=%s: %s",
                    start, end, user_id, self.mode.value, aov)
        return aov

    def top_purchased_variants(self, start: datetime, end: datetime, limit: int = 5) -> List[VariantTally]:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        return self.strategy.rank_variants(self._criteria(start, end), limit)

    def most_purchased_variant(self, start: datetime, end: datetime) -> Optional[ProductVariant]:
        top = self.top_purchased_variants(start, end, limit=1)
        if not top:
            logger.info("No purchased variants %s..%s", start, end)
            return None

        variant = self.stores.variants.load(top[0].variant_id)
        if variant is None:
            logger.warning("Most purchased variant %s not found", top[0].variant_id)
        return variant


def create_reporter(settings: Optional[Settings] = None, stores: Optional[AnalyticsStores] = None) -> OrderAnalyticsReporter:
    """Reporter over the Postgres stores, configured from settings / .env."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    return OrderAnalyticsReporter.from_settings(stores or postgres_stores(), settings)
