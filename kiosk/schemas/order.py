from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from kiosk.models.order import OrderStatus, PaymentMethod
from kiosk.schemas.base import CamelModel


class CreateOrderRequest(CamelModel):
    item_id: str
    payment_method: PaymentMethod
    # Optional echo of the price the client displayed; must match the catalog.
    amount: Any = None


class OrderOut(CamelModel):
    order_id: str
    item_id: str
    amount: Decimal
    payment_method: PaymentMethod
    status: OrderStatus
    created_at: datetime
    redeemed_at: Optional[datetime] = None


class OrderCreated(OrderOut):
    otp: str
