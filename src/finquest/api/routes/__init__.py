"""API routes."""

from fastapi import APIRouter

from finquest.api.routes import auth, financial, transactions, users

router = APIRouter(prefix="/api")

# Include routers
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(financial.router)
router.include_router(transactions.router)
