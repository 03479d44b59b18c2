import logging

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kiosk.core.errors import Unauthorized
from kiosk.core.security import decode_token, verify_machine_key

logger = logging.getLogger(__name__)
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = str(payload.get("sub") or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


def require_machine(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> str:
    # Runs before body validation, so unauthenticated callers only ever see 401.
    if not verify_machine_key(x_api_key):
        logger.warning("Rejected machine request with missing or invalid API key")
        raise Unauthorized()
    return x_api_key
