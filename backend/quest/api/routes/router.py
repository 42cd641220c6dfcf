"""API router aggregator.

All endpoint routers are included here and mounted under /api.
"""

from fastapi import APIRouter

from quest.api.routes import admin, company

router = APIRouter()

# =============================================================================
# Companies
# =============================================================================

router.include_router(company.router, prefix="/company", tags=["company"])

# =============================================================================
# Admin
# =============================================================================

router.include_router(admin.router, prefix="/admin", tags=["admin"])
