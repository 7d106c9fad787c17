"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from zapshift.app.api.v1.endpoints import parcels, riders, tracking, users

router = APIRouter()

# Users & roles
router.include_router(users.router)

# Parcels
router.include_router(parcels.router)

# Rider applications, approval and workspace (earnings / cashout)
router.include_router(riders.router)
router.include_router(riders.workspace_router)

# Tracking logs
router.include_router(tracking.router)
