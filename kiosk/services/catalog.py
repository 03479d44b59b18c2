import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from kiosk.core.errors import ItemNotFound
from kiosk.models import Drink


logger = logging.getLogger(__name__)


DEFAULT_DRINKS = [
    {"id": "drink-cola", "name": "Cola", "price": Decimal("150.00"), "image_url": "/images/cola.png", "description": "Classic chilled cola, 330ml can."},
    {"id": "drink-orange", "name": "Orange Soda", "price": Decimal("150.00"), "image_url": "/images/orange.png", "description": "Sparkling orange, 330ml can."},
    {"id": "drink-water", "name": "Still Water", "price": Decimal("100.00"), "image_url": "/images/water.png", "description": "Still table water, 500ml bottle."},
    {"id": "drink-malt", "name": "Malt Drink", "price": Decimal("250.00"), "image_url": "/images/malt.png", "description": "Non-alcoholic malt, 330ml bottle."},
    {"id": "drink-energy", "name": "Energy Drink", "price": Decimal("400.00"), "image_url": "/images/energy.png", "description": "Energy drink, 250ml can."},
    {"id": "drink-juice", "name": "Apple Juice", "price": Decimal("300.00"), "image_url": "/images/juice.png", "description": "100% apple juice, 300ml carton."},
]


def list_drinks(db: Session) -> list[Drink]:
    return db.query(Drink).order_by(Drink.name.asc()).all()


def get_drink(db: Session, drink_id: str) -> Drink:
    drink = db.query(Drink).filter(Drink.id == str(drink_id or "").strip()).first()
    if not drink:
        raise ItemNotFound()
    return drink


def seed_default_drinks(db: Session) -> int:
    added = 0
    for item in DEFAULT_DRINKS:
        existing = db.query(Drink).filter(Drink.id == item["id"]).first()
        if not existing:
            db.add(Drink(**item))
            added += 1
    if added:
        db.commit()
        logger.info("Seeded %s catalog drink(s).", added)
    return added
