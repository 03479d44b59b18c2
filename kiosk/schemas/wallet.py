from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from kiosk.models.transaction import TransactionType
from kiosk.schemas.base import CamelModel


class WalletOut(CamelModel):
    balance: Decimal


class TopUpRequest(CamelModel):
    # Validated by normalize_amount so bad input maps to INVALID_AMOUNT.
    amount: Any = None


class TopUpResponse(CamelModel):
    new_balance: Decimal


class TransactionOut(CamelModel):
    id: int
    tx_type: TransactionType
    amount: Decimal
    reference: str
    description: str
    created_at: Optional[datetime] = None
