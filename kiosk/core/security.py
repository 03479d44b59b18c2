from datetime import datetime, timedelta, timezone
import hmac

import jwt

from kiosk.core.config import get_settings

settings = get_settings()


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    # Tokens normally come from the auth collaborator; this mints compatible ones
    # for local tooling and tests.
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject),
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise ValueError("Invalid token") from exc


def verify_machine_key(candidate: str | None) -> bool:
    expected = settings.machine_api_key or ""
    if not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())
