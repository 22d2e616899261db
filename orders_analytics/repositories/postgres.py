# orders_analytics/repositories/postgres.py
"""
Postgres-backed repositories (psycopg 3).

Expected tables, owned by the commerce backend:

    commerce.orders          (order_id, user_id, state, completed_at, changed_at,
                              total_price_number, total_price_currency)
    commerce.order_items     (order_item_id, order_id, purchased_variant_id, quantity,
                              unit_price_number, unit_price_currency)
    commerce.product_variants (variant_id, sku, title, price_number, price_currency)

Every repository takes a ``connect`` callable returning a context manager that
yields a psycopg connection; by default the shared pool from core.db.
Database errors are not caught here.
"""

import logging
from decimal import Decimal
from typing import Any, Callable, ContextManager, Dict, List, Optional, Sequence, Tuple

from orders_analytics.core.db import get_conn
from orders_analytics.domain.models import Order, OrderItem, OrderTimestamp, ProductVariant
from orders_analytics.domain.price import Price
from .base import AnalyticsStores, OrderCriteria, VariantTally

logger = logging.getLogger(__name__)

Connect = Callable[[], ContextManager[Any]]

TIMESTAMP_COLUMNS = {
    OrderTimestamp.COMPLETED: "completed_at",
    OrderTimestamp.CHANGED: "changed_at",
}

ORDER_COLUMNS = """
    o.order_id, o.user_id, o.state, o.completed_at, o.changed_at,
    o.total_price_number, o.total_price_currency
"""


def build_order_filter(criteria: OrderCriteria, alias: str = "o") -> Tuple[str, List[Any]]:
    """Render the shared order predicate as a WHERE fragment plus parameters."""
    column = f"{alias}.{TIMESTAMP_COLUMNS[criteria.timestamp]}"
    clauses = [
        f"{alias}.state = %s",
        f"{column} >= %s",
        f"{column} <= %s",
    ]
    params: List[Any] = [criteria.state.value, criteria.start, criteria.end]

    if criteria.user_id:
        clauses.append(f"{alias}.user_id = %s")
        params.append(criteria.user_id)

    return " AND ".join(clauses), params


def _price(number, currency) -> Optional[Price]:
    if number is None or currency is None:
        return None
    return Price(amount=number, currency_code=currency)


class PostgresOrderRepository:
    def __init__(self, connect: Connect = get_conn):
        self._connect = connect

    def find_ids(self, criteria: OrderCriteria) -> List[int]:
        where, params = build_order_filter(criteria)
        sql = f"""
        SELECT o.order_id
        FROM commerce.orders o
        WHERE {where}
        ORDER BY o.order_id;
        """
        logger.debug("find_ids %s", criteria)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
        return [row[0] for row in rows]

    def count(self, criteria: OrderCriteria) -> int:
        where, params = build_order_filter(criteria)
        sql = f"""
        SELECT COUNT(*)::int
        FROM commerce.orders o
        WHERE {where};
        """
        logger.debug("count %s", criteria)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
        return int(row[0]) if row else 0

    def average_total(self, criteria: OrderCriteria, currency_code: str) -> Optional[Decimal]:
        where, params = build_order_filter(criteria)
        sql = f"""
        SELECT AVG(o.total_price_number)::numeric
        FROM commerce.orders o
        WHERE {where}
          AND o.total_price_currency = %s
          AND o.total_price_number IS NOT NULL;
        """
        params.append(currency_code)
        logger.debug("average_total %s %s", criteria, currency_code)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
        if row is None or row[0] is None:
            return None
        return Decimal(row[0])

    def load_multiple(self, order_ids: Sequence[int]) -> List[Order]:
        if not order_ids:
            return []
        ids = list(order_ids)

        orders_sql = f"""
        SELECT {ORDER_COLUMNS}
        FROM commerce.orders o
        WHERE o.order_id = ANY(%s);
        """
        items_sql = """
        SELECT oi.order_item_id, oi.order_id, oi.purchased_variant_id, oi.quantity,
               oi.unit_price_number, oi.unit_price_currency
        FROM commerce.order_items oi
        WHERE oi.order_id = ANY(%s)
        ORDER BY oi.order_id, oi.order_item_id;
        """
        logger.debug("load_multiple %d orders", len(ids))
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(orders_sql, (ids,))
                order_rows = cur.fetchall()
                cur.execute(items_sql, (ids,))
                item_rows = cur.fetchall()

        items_by_order: Dict[int, List[OrderItem]] = {}
        for (item_id, order_id, variant_id, quantity, unit_number, unit_currency) in item_rows:
            items_by_order.setdefault(order_id, []).append(
                OrderItem(
                    order_item_id=item_id,
                    order_id=order_id,
                    purchased_variant_id=variant_id,
                    quantity=int(quantity),
                    unit_price=Price(amount=unit_number, currency_code=unit_currency),
                )
            )

        by_id: Dict[int, Order] = {}
        for (order_id, user_id, state, completed_at, changed_at, number, currency) in order_rows:
            by_id[order_id] = Order(
                order_id=order_id,
                user_id=user_id,
                state=state,
                completed_at=completed_at,
                changed_at=changed_at,
                total_price=_price(number, currency),
                items=items_by_order.get(order_id, []),
            )

        # keep the caller's id order, skip ids that no longer exist
        return [by_id[i] for i in ids if i in by_id]


class PostgresOrderItemAggregates:
    def __init__(self, connect: Connect = get_conn):
        self._connect = connect

    def top_variants(self, criteria: OrderCriteria, limit: int) -> List[VariantTally]:
        where, params = build_order_filter(criteria)
        sql = f"""
        SELECT
            oi.purchased_variant_id,
            COUNT(*)::int        AS count,
            SUM(oi.quantity)::int AS sum
        FROM commerce.order_items oi
        INNER JOIN commerce.orders o ON oi.order_id = o.order_id
        WHERE {where}
        GROUP BY oi.purchased_variant_id
        ORDER BY sum DESC
        LIMIT %s;
        """
        params.append(limit)
        logger.debug("top_variants %s limit=%d", criteria, limit)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
        return [
            VariantTally(variant_id=variant_id, line_count=int(count), quantity=int(total))
            for (variant_id, count, total) in rows
        ]


class PostgresVariantRepository:
    def __init__(self, connect: Connect = get_conn):
        self._connect = connect

    def load(self, variant_id: int) -> Optional[ProductVariant]:
        sql = """
        SELECT variant_id, sku, title, price_number, price_currency
        FROM commerce.product_variants
        WHERE variant_id = %s;
        """
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (variant_id,))
                row = cur.fetchone()
        if row is None:
            return None
        vid, sku, title, number, currency = row
        return ProductVariant(
            variant_id=vid,
            sku=sku or "",
            title=title or "",
            price=_price(number, currency),
        )


def postgres_stores(connect: Connect = get_conn) -> AnalyticsStores:
    return AnalyticsStores(
        orders=PostgresOrderRepository(connect),
        order_items=PostgresOrderItemAggregates(connect),
        variants=PostgresVariantRepository(connect),
    )
