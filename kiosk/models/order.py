import enum
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String, text
from sqlalchemy.orm import relationship
from kiosk.core.database import Base
from kiosk.models.base import TimestampMixin


class PaymentMethod(str, enum.Enum):
    WALLET = "wallet"
    CARD = "card"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


def new_order_id() -> str:
    return uuid.uuid4().hex


class Order(Base, TimestampMixin):
    """
    One purchase attempt and its redemption code.

    payment_method/status are plain strings so the partial OTP index can be
    expressed identically on PostgreSQL and SQLite.
    """

    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_order_id)
    user_id = Column(String(64), nullable=False, index=True)
    drink_id = Column(String(36), ForeignKey("drinks.id"), nullable=False)
    amount = Column(Numeric(8, 2), nullable=False)
    payment_method = Column(String(16), nullable=False)  # wallet|card
    otp = Column(String(4), nullable=False)
    status = Column(String(16), nullable=False, default=OrderStatus.PENDING.value)  # pending|completed|expired
    redeemed_at = Column(DateTime(timezone=True), nullable=True)

    drink = relationship("Drink")


Index("ix_orders_otp", Order.otp)
Index("ix_orders_user_created", Order.user_id, Order.created_at)
# A code may repeat across finished orders but never among pending ones.
Index(
    "uq_orders_pending_otp",
    Order.otp,
    unique=True,
    postgresql_where=text("status = 'pending'"),
    sqlite_where=text("status = 'pending'"),
)
