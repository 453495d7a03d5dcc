"""Master API router: includes all sub-routers."""

from fastapi import APIRouter

from .routes.notifications import router as notifications_router
from .routes.reports import router as reports_router
from .routes.simulation import router as simulation_router
from .websockets.events import router as ws_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(simulation_router)
api_router.include_router(notifications_router)
api_router.include_router(reports_router)

# WebSocket router is mounted at root level (no prefix)
websocket_router = ws_router
