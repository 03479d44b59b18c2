from decimal import Decimal
from functools import lru_cache
import json

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors_origins(value: str) -> list[str]:
    if not value:
        return []

    parsed: list[str]
    raw = value.strip()
    if raw.startswith("["):
        try:
            items = json.loads(raw)
            parsed = [str(item).strip() for item in items if str(item).strip()]
        except (TypeError, ValueError):
            parsed = []
    else:
        parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]

    # Preserve order and remove duplicates.
    return list(dict.fromkeys(parsed))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Vend Kiosk"
    environment: str = "development"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Principal resolution (tokens are issued by the auth collaborator)
    secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: int = 15
    db_pool_recycle: int = 1200
    db_pool_pre_ping: bool = True

    # Vending machines authenticate with a static shared key per request.
    machine_api_key: str
    machine_rate_limit: str = "30/minute"

    # Orders / OTP
    order_expiry_minutes: int = 5
    otp_max_attempts: int = 10
    order_rate_limit: str = "10/minute"

    # Wallet
    wallet_default_balance: Decimal = Decimal("0.00")

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    auto_create_tables: bool = False
    seed_catalog: bool = False
    rate_limit_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
