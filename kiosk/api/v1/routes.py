from fastapi import APIRouter
from kiosk.api.v1.endpoints import drinks, machine, orders, wallet

router = APIRouter()

router.include_router(drinks.router, prefix="/drinks", tags=["drinks"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
router.include_router(machine.router, prefix="/machine", tags=["machine"])
