"""
API router setup
Organized into: public (no auth) and dashboard (JWT + route permission table) routes
"""
from fastapi import APIRouter

from app.api.v1.public import auth
from app.api.v1.dashboard import availability, roles, user_access

api_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_router.include_router(
    auth.router,
    # No prefix needed - auth.router already has "/auth" prefix
    tags=["Authentication"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT + permission from the route table)
# ============================================================================
api_router.include_router(user_access.router)
api_router.include_router(roles.router)
api_router.include_router(availability.router)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_router.get("/", tags=["Info"])
async def api_info():
    """API information and how each route group is authorized."""
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "dashboard": "JWT Bearer token required; permission looked up from the route table",
        }
    }
