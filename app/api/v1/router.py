from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.access import router as access_router
from app.api.v1.market import router as market_router
from app.api.v1.ledger import router as ledger_router
from app.api.v1.editions import router as editions_router
from app.api.v1.tokens import router as tokens_router
from app.api.v1.purchases import router as purchases_router
from app.api.v1.auctions import router as auctions_router
from app.api.v1.self_service import router as self_service_router
from app.api.v1.events import router as events_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(access_router, tags=["access"])
v1_router.include_router(market_router, tags=["market"])

# ------------------------------------------------------------------
# FUNGIBLE LEDGER
# ------------------------------------------------------------------
v1_router.include_router(ledger_router, tags=["ledger"])

# ------------------------------------------------------------------
# EDITIONS / TOKENS
# ------------------------------------------------------------------
v1_router.include_router(editions_router, tags=["editions"])
v1_router.include_router(tokens_router, tags=["tokens"])
v1_router.include_router(self_service_router, tags=["self-service"])

# ------------------------------------------------------------------
# MARKET OPS
# ------------------------------------------------------------------
v1_router.include_router(purchases_router, tags=["purchases"])
v1_router.include_router(auctions_router, tags=["auctions"])

# ------------------------------------------------------------------
# EVENTS
# ------------------------------------------------------------------
v1_router.include_router(events_router, tags=["events"])
