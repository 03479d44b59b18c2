from sqlalchemy import Column, Integer, String, Numeric, Text
from kiosk.core.database import Base
from kiosk.models.base import TimestampMixin


class Drink(Base, TimestampMixin):
    __tablename__ = "drinks"

    id = Column(String(36), primary_key=True)
    name = Column(String(128), nullable=False)
    price = Column(Numeric(8, 2), nullable=False)
    image_url = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    in_stock = Column(Integer, default=10, nullable=False)
