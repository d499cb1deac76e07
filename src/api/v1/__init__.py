"""
API v1 package.

Contains versioned API routes for the name registration service.
"""

from fastapi import APIRouter

from src.api.v1 import directory, domains, routes

router = APIRouter()
router.include_router(routes.router)
router.include_router(domains.router)
router.include_router(directory.router)

__all__ = ["router"]
