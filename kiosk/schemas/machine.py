from typing import Any

from kiosk.schemas.base import CamelModel


class RedeemRequest(CamelModel):
    # Left untyped so a malformed code reaches the redemption checks and
    # is reported as INVALID_FORMAT rather than a schema error.
    otp: Any = None


class RedeemResponse(CamelModel):
    success: bool
    item_id: str
