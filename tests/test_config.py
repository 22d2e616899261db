import logging

from orders_analytics.core.config import Settings
from orders_analytics.core.logging import LOGGER_NAME, setup_logging


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_NAME", "commerce")
    monkeypatch.setenv("DB_USER", "reporter")
    monkeypatch.setenv("DB_PASSWORD", "secret")
    monkeypatch.setenv("AGGREGATION_MODE", "in_memory")
    settings = Settings(_env_file=None)

    assert settings.aggregation_mode == "in_memory"
    assert settings.database_dsn == (
        "host=db.internal dbname=commerce user=reporter password=secret sslmode=require"
    )


def test_settings_defaults(monkeypatch):
    for name in ("DEFAULT_CURRENCY", "AGGREGATION_MODE", "ORDER_TIMESTAMP", "DB_POOL_MAX_SIZE"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.default_currency == "USD"
    assert settings.aggregation_mode == "database"
    assert settings.order_timestamp == "completed"
    assert settings.db_pool_max_size == 5


def test_setup_logging_is_idempotent():
    logger = setup_logging("DEBUG")
    handlers = list(logger.handlers)
    again = setup_logging("INFO")
    assert again is logger
    assert again.handlers == handlers
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
