from fastapi import APIRouter
from app.api.v1.endpoints import auth, wallet, bets, games

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
router.include_router(bets.router, prefix="/bets", tags=["bets"])
router.include_router(games.router, prefix="/games", tags=["games"])
