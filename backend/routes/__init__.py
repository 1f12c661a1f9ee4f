"""API routes for the flowr player backend."""

from backend.routes.library import router as library_router
from backend.routes.notifications import router as notifications_router
from backend.routes.player import router as player_router
from backend.routes.queue import router as queue_router
from backend.routes.stream import router as stream_router
from backend.routes.websocket import router as websocket_router

__all__ = [
    "library_router",
    "notifications_router",
    "player_router",
    "queue_router",
    "stream_router",
    "websocket_router",
]
