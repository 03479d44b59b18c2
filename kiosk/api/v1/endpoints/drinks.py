from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from kiosk.core.database import get_db
from kiosk.schemas.drink import DrinkOut
from kiosk.services.catalog import get_drink, list_drinks

router = APIRouter()


@router.get("", response_model=list[DrinkOut])
def drinks(db: Session = Depends(get_db)):
    return [DrinkOut.model_validate(drink) for drink in list_drinks(db)]


@router.get("/{drink_id}", response_model=DrinkOut)
def drink_detail(drink_id: str, db: Session = Depends(get_db)):
    return DrinkOut.model_validate(get_drink(db, drink_id))
