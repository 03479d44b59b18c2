"""Typed failures raised by the wallet, catalog and order services.

Each error carries an HTTP status and a stable machine-readable code. The
FastAPI app renders them as ``{"detail": message, "code": code}`` so the
vending machine can decide whether to dispense from the status alone.
"""


class KioskError(Exception):
    status_code = 400
    code = "KIOSK_ERROR"
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAmount(KioskError):
    status_code = 400
    code = "INVALID_AMOUNT"
    default_message = "Invalid amount"


class InvalidFormat(KioskError):
    status_code = 400
    code = "INVALID_FORMAT"
    default_message = "OTP must be exactly 4 digits"


class InsufficientFunds(KioskError):
    status_code = 400
    code = "INSUFFICIENT_FUNDS"
    default_message = "Insufficient balance"


class Unauthorized(KioskError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Invalid machine credential"


class Forbidden(KioskError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(KioskError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Order not found"


class ItemNotFound(NotFound):
    code = "ITEM_NOT_FOUND"
    default_message = "Drink not found"


class AlreadyRedeemed(KioskError):
    status_code = 409
    code = "ALREADY_REDEEMED"
    default_message = "OTP already redeemed"


class Conflict(AlreadyRedeemed):
    # Lost a concurrent redemption race; callers see it as AlreadyRedeemed.
    code = "ALREADY_REDEEMED"


class Expired(KioskError):
    status_code = 410
    code = "EXPIRED"
    default_message = "OTP expired"


class OtpUnavailable(KioskError):
    status_code = 503
    code = "OTP_UNAVAILABLE"
    default_message = "Could not allocate a redemption code. Please retry."
