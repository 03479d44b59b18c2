import logging
import secrets
from decimal import Decimal, InvalidOperation
from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kiosk.core.config import get_settings
from kiosk.core.errors import InsufficientFunds, InvalidAmount
from kiosk.models import Wallet, Transaction, TransactionType


settings = get_settings()
logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0)).quantize(CENT)


def normalize_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount()
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    if amount > MAX_AMOUNT:
        raise InvalidAmount("Amount is too large")
    if amount != amount.quantize(CENT):
        raise InvalidAmount("Amount must have at most two decimal places")
    return amount.quantize(CENT)


def top_up_reference() -> str:
    return f"TOPUP_{secrets.token_hex(8)}"


def get_or_create_wallet(db: Session, user_id: str) -> Wallet:
    wallet = db.query(Wallet).filter(Wallet.user_id == user_id).first()
    if wallet:
        return wallet

    opening = to_money(settings.wallet_default_balance)
    wallet = Wallet(user_id=user_id, balance=opening)
    db.add(wallet)
    try:
        db.flush()
        if opening > 0:
            # Keep balance == sum(credits) - sum(debits) from the first row on.
            db.add(Transaction(
                user_id=user_id,
                wallet_id=wallet.id,
                tx_type=TransactionType.CREDIT,
                amount=opening,
                reference=f"OPEN_{wallet.id}",
                description="Opening balance",
            ))
        db.commit()
    except IntegrityError:
        # A concurrent request created the wallet first.
        db.rollback()
        return db.query(Wallet).filter(Wallet.user_id == user_id).one()
    db.refresh(wallet)
    logger.info("Created wallet user=%s opening_balance=%s", user_id, opening)
    return wallet


def _current_balance(db: Session, wallet_id: int) -> Decimal:
    value = db.execute(select(Wallet.balance).where(Wallet.id == wallet_id)).scalar_one()
    return to_money(value)


def get_balance(db: Session, user_id: str) -> Decimal:
    wallet = get_or_create_wallet(db, user_id)
    return _current_balance(db, wallet.id)


def credit_wallet(
    db: Session,
    user_id: str,
    amount,
    reference: str,
    description: str,
    *,
    commit: bool = True,
) -> Decimal:
    amount = normalize_amount(amount)
    wallet = get_or_create_wallet(db, user_id)
    db.execute(
        update(Wallet)
        .where(Wallet.id == wallet.id)
        .values(balance=Wallet.balance + amount)
        .execution_options(synchronize_session=False)
    )
    db.add(Transaction(
        user_id=user_id,
        wallet_id=wallet.id,
        tx_type=TransactionType.CREDIT,
        amount=amount,
        reference=reference,
        description=description,
    ))
    db.flush()
    new_balance = _current_balance(db, wallet.id)
    if commit:
        db.commit()
    logger.info("Wallet credit user=%s amount=%s new_balance=%s ref=%s", user_id, amount, new_balance, reference)
    return new_balance


def debit_wallet(
    db: Session,
    user_id: str,
    amount,
    reference: str,
    description: str,
    *,
    commit: bool = True,
) -> Decimal:
    amount = normalize_amount(amount)
    wallet = get_or_create_wallet(db, user_id)
    # Check and subtract in one statement so concurrent debits cannot overdraw.
    result = db.execute(
        update(Wallet)
        .where(Wallet.id == wallet.id, Wallet.balance >= amount)
        .values(balance=Wallet.balance - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        if commit:
            db.rollback()
        logger.info("Wallet debit rejected user=%s amount=%s: insufficient balance", user_id, amount)
        raise InsufficientFunds()
    db.add(Transaction(
        user_id=user_id,
        wallet_id=wallet.id,
        tx_type=TransactionType.DEBIT,
        amount=amount,
        reference=reference,
        description=description,
    ))
    db.flush()
    new_balance = _current_balance(db, wallet.id)
    if commit:
        db.commit()
    logger.info("Wallet debit user=%s amount=%s new_balance=%s ref=%s", user_id, amount, new_balance, reference)
    return new_balance


def top_up_wallet(db: Session, user_id: str, amount) -> Decimal:
    return credit_wallet(db, user_id, amount, top_up_reference(), "Wallet top-up")


def list_transactions(db: Session, user_id: str, limit: int = 50) -> list[Transaction]:
    return (
        db.query(Transaction)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(limit)
        .all()
    )


def ledger_balance(db: Session, user_id: str) -> Decimal:
    signed = case(
        (Transaction.tx_type == TransactionType.CREDIT, Transaction.amount),
        else_=-Transaction.amount,
    )
    total = (
        db.query(func.coalesce(func.sum(signed), 0))
        .filter(Transaction.user_id == user_id)
        .scalar()
    )
    return to_money(total)


def audit_wallet(db: Session, user_id: str) -> bool:
    wallet = db.query(Wallet).filter(Wallet.user_id == user_id).first()
    if not wallet:
        return True
    stored = _current_balance(db, wallet.id)
    expected = ledger_balance(db, user_id)
    if stored != expected:
        logger.critical(
            "Wallet ledger mismatch user=%s stored=%s ledger=%s; manual reconciliation required",
            user_id,
            stored,
            expected,
        )
        return False
    return True
