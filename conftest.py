import pytest

from gashub.config import set_config_for_test


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Every test starts from default config, unaffected by the caller's environment."""
    for var in ["ORDER_BACKEND", "DATA_DIR", "CURRENT_USER_ID", "ORDERS_COLLECTION", "LOG_LEVEL", "APP_ENV"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(log_level="WARNING")
    yield
    set_config_for_test()
