# Inspired by https://github.com/databricks-solutions/brickhouse-brands-demo/blob/main/backend/app/auth.py
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"

    # Order storage
    order_backend: Literal["memory", "jsonl"] = "memory"
    orders_collection: str = "pedidos"
    data_dir: str = "sample_data"

    # Session
    current_user_id: Optional[str] = None
    anonymous_user_id: str = "anonymous"

    # Order entry
    default_product_name: str = "Botijão de 13kg"

    # Dashboard defaults
    default_date_range: Literal["today", "this_week", "this_month", "custom"] = "today"
    default_status_filter: Literal["all", "paid", "credit", "pending"] = "all"
    default_sort_by: Literal["date", "value", "customer_name"] = "date"
    default_sort_order: Literal["asc", "desc"] = "desc"

    # UI settings
    default_row_limit: int = 500
    min_row_limit: int = 50
    max_row_limit: int = 5000

    # Seed data settings
    default_seed_orders: int = 60
    default_seed_days: int = 30
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
