# orders_analytics/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    db_host: str | None = None
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = None
    db_sslmode: str = "require"  # 'require' for RDS/Aurora

    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_timeout: float = 10.0

    default_currency: str = "USD"
    aggregation_mode: str = "database"  # database | in_memory
    order_timestamp: str = "completed"  # completed | changed

    log_level: str = "INFO"

    @property
    def database_dsn(self) -> str:
        # psycopg DSN
        return (
            f"host={self.db_host} dbname={self.db_name} user={self.db_user} "
            f"password={self.db_password} sslmode={self.db_sslmode}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
