import itertools
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import pytest

from orders_analytics.domain.models import Order, OrderItem, OrderState, ProductVariant
from orders_analytics.domain.price import Price
from orders_analytics.repositories.memory import memory_stores

START = datetime(2025, 11, 1, tzinfo=timezone.utc)
END = datetime(2025, 11, 30, 23, 59, 59, tzinfo=timezone.utc)

_item_ids = itertools.count(1)


def make_order(
    order_id,
    total="10.00",
    currency="USD",
    user_id=1,
    completed_at=None,
    state=OrderState.COMPLETED,
    items=(),
):
    """Build an order; items is a list of (variant_id, quantity)."""
    if completed_at is None and state == OrderState.COMPLETED:
        completed_at = START + timedelta(days=1)
    return Order(
        order_id=order_id,
        state=state,
        user_id=user_id,
        completed_at=completed_at,
        changed_at=completed_at or START,
        total_price=Price(amount=total, currency_code=currency) if total is not None else None,
        items=[
            OrderItem(
                order_item_id=next(_item_ids),
                order_id=order_id,
                purchased_variant_id=variant_id,
                quantity=qty,
                unit_price=Price(amount="1.00", currency_code=currency),
            )
            for variant_id, qty in items
        ],
    )


VARIANTS = [
    ProductVariant(variant_id=100, sku="TSHIRT-S", title="T-shirt S"),
    ProductVariant(variant_id=200, sku="TSHIRT-M", title="T-shirt M"),
    ProductVariant(variant_id=300, sku="MUG", title="Mug"),
]


@pytest.fixture
def window():
    return START, END


@pytest.fixture
def variants():
    return list(VARIANTS)


@pytest.fixture
def build_stores(variants):
    def _build(orders):
        return memory_stores(orders, variants)
    return _build


# ------------- Fake psycopg pool ------------- #

class FakeCursor:
    def __init__(self, results):
        self.results = results
        self.executed = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))
        result = self.results.pop(0) if self.results else []
        if isinstance(result, Exception):
            raise result
        self._rows = result

    def fetchall(self):
        return list(self._rows)

    def fetchone(self):
        return self._rows[0] if self._rows else None


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


@pytest.fixture
def fake_db():
    """
    Returns (connect, cursor). Queue one result per execute() on
    cursor.results: a list of row tuples, or an exception to raise.
    """
    cursor = FakeCursor([])

    @contextmanager
    def connect():
        yield FakeConnection(cursor)

    return connect, cursor
