"""Redemption code generation.

Codes are four zero-padded digits drawn uniformly from ``0000``-``9999``.
Four digits carry little entropy on their own; the codes stay safe because
they are single-use, expire after a few minutes and can only be redeemed by a
machine holding the shared API key.
"""
import re
import secrets

from sqlalchemy.orm import Session

from kiosk.core.config import get_settings
from kiosk.core.errors import OtpUnavailable
from kiosk.models import Order, OrderStatus

settings = get_settings()

OTP_LENGTH = 4
OTP_SPACE = 10 ** OTP_LENGTH
_OTP_PATTERN = re.compile(r"[0-9]{4}")


def generate_otp() -> str:
    return f"{secrets.randbelow(OTP_SPACE):0{OTP_LENGTH}d}"


def is_valid_otp_format(value) -> bool:
    return isinstance(value, str) and _OTP_PATTERN.fullmatch(value) is not None


def pending_otps(db: Session) -> set[str]:
    rows = db.query(Order.otp).filter(Order.status == OrderStatus.PENDING.value).all()
    return {row[0] for row in rows}


def generate_unique_otp(db: Session, attempts: int | None = None) -> str:
    """Draw a code that no pending order currently holds.

    The check is best-effort: two concurrent purchases can still draw the same
    free code, which the partial unique index rejects at insert time.
    """
    max_attempts = max(1, int(attempts or settings.otp_max_attempts))
    taken = pending_otps(db)
    if len(taken) >= OTP_SPACE:
        raise OtpUnavailable()
    for _ in range(max_attempts):
        otp = generate_otp()
        if otp not in taken:
            return otp
    raise OtpUnavailable()
