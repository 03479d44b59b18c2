from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from kiosk.core.config import get_settings
from kiosk.core.database import get_db
from kiosk.dependencies import get_current_user_id
from kiosk.middlewares.rate_limit import limiter
from kiosk.models import Order
from kiosk.schemas.order import CreateOrderRequest, OrderCreated, OrderOut
from kiosk.services.orders import create_order, get_order, list_orders

router = APIRouter()
settings = get_settings()


def _order_fields(order: Order) -> dict:
    return {
        "order_id": order.id,
        "item_id": order.drink_id,
        "amount": order.amount,
        "payment_method": order.payment_method,
        "status": order.status,
        "created_at": order.created_at,
        "redeemed_at": order.redeemed_at,
    }


@router.post("", response_model=OrderCreated, status_code=201)
@limiter.limit(settings.order_rate_limit)
def place_order(
    request: Request,
    payload: CreateOrderRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    order = create_order(
        db,
        user_id=user_id,
        item_id=payload.item_id,
        payment_method=payload.payment_method,
        amount=payload.amount,
    )
    # The only response that ever carries the plaintext OTP.
    return OrderCreated(otp=order.otp, **_order_fields(order))


@router.get("", response_model=list[OrderOut])
def my_orders(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return [OrderOut(**_order_fields(order)) for order in list_orders(db, user_id)]


@router.get("/{order_id}", response_model=OrderOut)
def order_detail(order_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    order = get_order(db, order_id, user_id)
    return OrderOut(**_order_fields(order))
