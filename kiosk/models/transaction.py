import enum
from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, Enum, Index
from sqlalchemy.orm import relationship
from kiosk.core.database import Base
from kiosk.models.base import TimestampMixin


class TransactionType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class Transaction(Base, TimestampMixin):
    """Append-only ledger entry recorded alongside every wallet balance change."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    wallet_id = Column(Integer, ForeignKey("wallets.id"), nullable=False)
    tx_type = Column(Enum(TransactionType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(64), nullable=False, index=True)
    description = Column(String(255), nullable=False)

    wallet = relationship("Wallet", back_populates="transactions")


Index("ix_transactions_wallet_id_type", Transaction.wallet_id, Transaction.tx_type)
