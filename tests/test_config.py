from decimal import Decimal

from kiosk.core.config import Settings, parse_cors_origins


def test_parse_cors_origins_csv():
    value = "http://localhost:5173, http://localhost:3000"
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def test_parse_cors_origins_json_list():
    value = '["http://localhost:5173", "https://kiosk.example.com"]'
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "https://kiosk.example.com",
    ]


def test_parse_cors_origins_deduplicates():
    value = "http://localhost:5173,http://localhost:5173"
    assert parse_cors_origins(value) == ["http://localhost:5173"]


def test_settings_defaults_for_orders_and_wallet(monkeypatch):
    monkeypatch.delenv("ORDER_EXPIRY_MINUTES", raising=False)
    monkeypatch.delenv("WALLET_DEFAULT_BALANCE", raising=False)
    settings = Settings(_env_file=None, secret_key="s", database_url="sqlite://", machine_api_key="k")
    assert settings.order_expiry_minutes == 5
    assert settings.wallet_default_balance == Decimal("0.00")
    assert settings.api_v1_prefix == "/api/v1"


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("ORDER_EXPIRY_MINUTES", "10")
    monkeypatch.setenv("WALLET_DEFAULT_BALANCE", "1000.00")
    settings = Settings(_env_file=None)
    assert settings.order_expiry_minutes == 10
    assert settings.wallet_default_balance == Decimal("1000.00")
