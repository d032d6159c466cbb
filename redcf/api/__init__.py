"""
API routes for the DCF engine.
"""

from fastapi import APIRouter

from redcf.api import calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
