"""Main router for API v1."""

from fastapi import APIRouter

from app.api.v1 import deployments, health, logs, runs

router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(health.router, tags=["health"])
router.include_router(deployments.router, tags=["deployments"])
router.include_router(logs.router, tags=["logs"])
router.include_router(runs.router, prefix="/runs", tags=["runs"])
