from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from kiosk.core.database import get_db
from kiosk.dependencies import get_current_user_id
from kiosk.middlewares.rate_limit import limiter
from kiosk.schemas.wallet import WalletOut, TopUpRequest, TopUpResponse, TransactionOut
from kiosk.services.wallet import get_balance, list_transactions, top_up_wallet

router = APIRouter()


@router.get("/me", response_model=WalletOut)
def get_wallet(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return WalletOut(balance=get_balance(db, user_id))


@router.get("/transactions", response_model=list[TransactionOut])
def get_transactions(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return [TransactionOut.model_validate(tx) for tx in list_transactions(db, user_id)]


@router.post("/top-up", response_model=TopUpResponse)
@limiter.limit("10/minute")
def top_up(request: Request, payload: TopUpRequest, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    # Card capture is simulated; the amount is credited as soon as it validates.
    new_balance = top_up_wallet(db, user_id, payload.amount)
    return TopUpResponse(new_balance=new_balance)
