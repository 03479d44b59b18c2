import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kiosk.core.config import get_settings
from kiosk.core.errors import (
    AlreadyRedeemed,
    Conflict,
    Expired,
    Forbidden,
    InsufficientFunds,
    InvalidAmount,
    InvalidFormat,
    NotFound,
    OtpUnavailable,
    Unauthorized,
)
from kiosk.core.security import verify_machine_key
from kiosk.models import Order, OrderStatus, PaymentMethod, Transaction, TransactionType
from kiosk.models.base import utcnow
from kiosk.models.order import new_order_id
from kiosk.services.catalog import get_drink
from kiosk.services.otp import generate_unique_otp, is_valid_otp_format
from kiosk.services.wallet import debit_wallet, get_or_create_wallet, normalize_amount, to_money


settings = get_settings()
logger = logging.getLogger(__name__)

_PENDING = OrderStatus.PENDING.value


@dataclass
class RedemptionResult:
    success: bool
    item_id: str
    order_id: str


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; everything is written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expiry_window() -> timedelta:
    return timedelta(minutes=settings.order_expiry_minutes)


def _is_pending_otp_conflict(exc: IntegrityError) -> bool:
    text = str(getattr(exc, "orig", exc)).lower()
    return "uq_orders_pending_otp" in text or "orders.otp" in text


def create_order(
    db: Session,
    *,
    user_id: str,
    item_id: str,
    payment_method: PaymentMethod | str,
    amount=None,
    now: datetime | None = None,
) -> Order:
    method = PaymentMethod(payment_method)
    drink = get_drink(db, item_id)
    price = to_money(drink.price)
    if amount is not None and normalize_amount(amount) != price:
        raise InvalidAmount("Amount does not match the current price")

    if method == PaymentMethod.WALLET:
        get_or_create_wallet(db, user_id)

    attempts = max(1, int(settings.otp_max_attempts))
    for attempt in range(1, attempts + 1):
        otp = generate_unique_otp(db)
        order_id = new_order_id()
        order = Order(
            id=order_id,
            user_id=user_id,
            drink_id=drink.id,
            amount=price,
            payment_method=method.value,
            otp=otp,
            status=_PENDING,
            created_at=now or utcnow(),
        )
        try:
            # Debit, ledger entry and order row commit together or not at all.
            if method == PaymentMethod.WALLET:
                debit_wallet(db, user_id, price, order_id, f"Purchase: {drink.name}", commit=False)
            # Card payments are authorised by the card form before we get here.
            db.add(order)
            db.commit()
        except InsufficientFunds:
            db.rollback()
            raise
        except IntegrityError as exc:
            db.rollback()
            if not _is_pending_otp_conflict(exc):
                raise
            logger.warning(
                "OTP collision on order insert user=%s attempt=%s/%s",
                user_id,
                attempt,
                attempts,
            )
            continue
        db.refresh(order)
        logger.info(
            "Order created id=%s user=%s drink=%s amount=%s method=%s",
            order.id,
            user_id,
            drink.id,
            price,
            method.value,
        )
        return order

    logger.error("Could not allocate a free OTP after %s attempts user=%s", attempts, user_id)
    raise OtpUnavailable()


def get_order(db: Session, order_id: str, user_id: str) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFound()
    if order.user_id != user_id:
        raise Forbidden()
    return order


def list_orders(db: Session, user_id: str, limit: int = 50) -> list[Order]:
    return (
        db.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc())
        .limit(limit)
        .all()
    )


def _find_order_by_otp(db: Session, otp: str) -> Order | None:
    pending = db.query(Order).filter(Order.otp == otp, Order.status == _PENDING).first()
    if pending:
        return pending
    return (
        db.query(Order)
        .filter(Order.otp == otp)
        .order_by(Order.created_at.desc())
        .first()
    )


def _transition(db: Session, order_id: str, target: OrderStatus, **values) -> bool:
    # Conditional on the row still being pending; exactly one caller can win.
    result = db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == _PENDING)
        .values(status=target.value, **values)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount == 1


def redeem_otp(db: Session, otp: str, machine_key: str | None, *, now: datetime | None = None) -> RedemptionResult:
    """Consume an OTP on behalf of a vending machine.

    Checks run in a fixed order (credential, format, existence, already used,
    expiry) so that a caller without the machine key learns nothing about
    which codes exist.
    """
    if not verify_machine_key(machine_key):
        logger.warning("Redemption rejected: invalid machine credential")
        raise Unauthorized()
    if not is_valid_otp_format(otp):
        raise InvalidFormat()

    order = _find_order_by_otp(db, otp)
    if not order:
        raise NotFound("Invalid OTP")
    if order.status == OrderStatus.COMPLETED:
        raise AlreadyRedeemed()
    if order.status == OrderStatus.EXPIRED:
        raise Expired()

    current = _as_utc(now or utcnow())
    if current - _as_utc(order.created_at) > expiry_window():
        _transition(db, order.id, OrderStatus.EXPIRED)
        logger.info("Order expired at redemption id=%s", order.id)
        raise Expired()

    if not _transition(db, order.id, OrderStatus.COMPLETED, redeemed_at=current):
        db.refresh(order)
        logger.info("Redemption lost race id=%s status=%s", order.id, order.status)
        if order.status == OrderStatus.EXPIRED:
            raise Expired()
        raise Conflict()

    logger.info("Order redeemed id=%s drink=%s", order.id, order.drink_id)
    return RedemptionResult(success=True, item_id=order.drink_id, order_id=order.id)


def expire_stale_orders(db: Session, *, now: datetime | None = None) -> int:
    cutoff = _as_utc(now or utcnow()) - expiry_window()
    result = db.execute(
        update(Order)
        .where(Order.status == _PENDING, Order.created_at < cutoff)
        .values(status=OrderStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount:
        logger.info("Expired %s stale pending order(s)", result.rowcount)
    return result.rowcount


def find_orphaned_debits(db: Session) -> list[Transaction]:
    rows = (
        db.query(Transaction)
        .outerjoin(Order, Order.id == Transaction.reference)
        .filter(Transaction.tx_type == TransactionType.DEBIT, Order.id.is_(None))
        .all()
    )
    for tx in rows:
        logger.critical(
            "Debit without order user=%s amount=%s ref=%s; manual reconciliation required",
            tx.user_id,
            tx.amount,
            tx.reference,
        )
    return rows
