from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String
from sqlalchemy.orm import relationship
from kiosk.core.database import Base
from kiosk.models.base import TimestampMixin


class Wallet(Base, TimestampMixin):
    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),)

    id = Column(Integer, primary_key=True)
    # Stable principal id handed to us by the auth collaborator.
    user_id = Column(String(64), unique=True, nullable=False, index=True)
    balance = Column(Numeric(12, 2), default=0, nullable=False)

    transactions = relationship("Transaction", back_populates="wallet")
