"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.admin import router as admin_router
from api.v1.auth import router as auth_router
from api.v1.election import router as election_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(election_router, prefix="/election", tags=["Election"])
router.include_router(admin_router, prefix="/admin", tags=["Admin"])
