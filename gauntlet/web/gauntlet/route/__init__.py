"""Route aggregation for the gauntlet web application."""

from fastapi import APIRouter

from . import admin, auth, gauntlet

router = APIRouter()
router.include_router(auth.router)
router.include_router(gauntlet.router)
router.include_router(admin.router)
router.include_router(admin.communications_router)
