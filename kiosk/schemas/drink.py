from decimal import Decimal
from typing import Optional

from kiosk.schemas.base import CamelModel


class DrinkOut(CamelModel):
    id: str
    name: str
    price: Decimal
    image_url: str
    description: Optional[str] = None
    in_stock: int
