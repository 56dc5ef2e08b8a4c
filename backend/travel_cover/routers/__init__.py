"""Travel Cover - API Routers"""
from .oracle import router as oracle_router
from .verification import router as verification_router
from .policies import router as policies_router, claims_router
from .admin import router as admin_router

__all__ = [
    "oracle_router",
    "verification_router",
    "policies_router",
    "claims_router",
    "admin_router",
]
