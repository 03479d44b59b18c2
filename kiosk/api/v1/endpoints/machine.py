from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from kiosk.core.config import get_settings
from kiosk.core.database import get_db
from kiosk.dependencies import require_machine
from kiosk.middlewares.rate_limit import limiter
from kiosk.schemas.machine import RedeemRequest, RedeemResponse
from kiosk.services.orders import redeem_otp

router = APIRouter()
settings = get_settings()


@router.post("/redeem", response_model=RedeemResponse)
@limiter.limit(settings.machine_rate_limit)
def redeem(
    request: Request,
    payload: RedeemRequest,
    machine_key: str = Depends(require_machine),
    db: Session = Depends(get_db),
):
    result = redeem_otp(db, payload.otp, machine_key)
    return RedeemResponse(success=result.success, item_id=result.item_id)
