from kiosk.models.wallet import Wallet
from kiosk.models.transaction import Transaction, TransactionType
from kiosk.models.drink import Drink
from kiosk.models.order import Order, OrderStatus, PaymentMethod

__all__ = [
    "Wallet",
    "Transaction",
    "TransactionType",
    "Drink",
    "Order",
    "OrderStatus",
    "PaymentMethod",
]
