"""
API Router Aggregator.

Combines the resource routers into a single router for the main app.
"""

from fastapi import APIRouter

from jobboard.api.routes import auth, community, cv, job

api_router = APIRouter()

# Include all routers with their prefixes and tags
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

api_router.include_router(
    cv.router,
    prefix="/cv",
    tags=["CV"],
)

api_router.include_router(
    job.router,
    prefix="/job",
    tags=["Jobs"],
)

api_router.include_router(
    community.router,
    prefix="/job",
    tags=["Comments & Messages"],
)
