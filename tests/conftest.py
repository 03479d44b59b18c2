import os
from contextlib import contextmanager
from decimal import Decimal

import pytest


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "Vend Kiosk Test",
        "ENVIRONMENT": "test",
        "SECRET_KEY": "test-secret",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "AUTO_CREATE_TABLES": "false",
        "SEED_CATALOG": "false",
        "DATABASE_URL": "sqlite://",
        "MACHINE_API_KEY": "machine-test-key",
        "ORDER_EXPIRY_MINUTES": "5",
        "OTP_MAX_ATTEMPTS": "10",
        "WALLET_DEFAULT_BALANCE": "0.00",
        "RATE_LIMIT_ENABLED": "false",
        "CORS_ORIGINS": "http://localhost:5173,http://localhost:3000",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()


MACHINE_KEY = os.environ["MACHINE_API_KEY"]


@pytest.fixture()
def engine(tmp_path):
    # A file database so threads in the concurrency tests share one store.
    from kiosk.core.database import Base, build_engine
    import kiosk.models  # noqa: F401

    eng = build_engine(f"sqlite:///{tmp_path / 'kiosk_test.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    from sqlalchemy.orm import sessionmaker

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def drinks(db):
    from kiosk.models import Drink

    rows = [
        Drink(id="drink-cola", name="Cola", price=Decimal("150.00"), image_url="/images/cola.png"),
        Drink(id="drink-water", name="Water", price=Decimal("100.00"), image_url="/images/water.png"),
    ]
    db.add_all(rows)
    db.commit()
    return {row.id: row for row in rows}


@pytest.fixture()
def client(session_factory):
    from fastapi.testclient import TestClient

    from kiosk.core.database import get_db
    from kiosk.main import app

    app.dependency_overrides.clear()

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    from kiosk.core.security import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def machine_headers(key: str = MACHINE_KEY) -> dict:
    return {"X-API-Key": key}


@contextmanager
def override_setting(name: str, value):
    from kiosk.core.config import get_settings

    settings = get_settings()
    original = getattr(settings, name)
    setattr(settings, name, value)
    try:
        yield
    finally:
        setattr(settings, name, original)
