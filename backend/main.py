"""FastAPI backend for the flowr player.

This is the main entry point for the playback service. It owns the single
playback session and exposes player, queue, library and stream-signing
endpoints plus a WebSocket for real-time events.
"""

import asyncio
import time
from backend.routes.library import router as library_router
from backend.routes.notifications import router as notifications_router
from backend.routes.player import router as player_router
from backend.routes.queue import router as queue_router
from backend.routes.stream import router as stream_router
from backend.routes.websocket import ConnectionManager, emit_notification, emit_player_state
from backend.routes.websocket import router as websocket_router
from backend.services.player import build_library, build_session
from config import API_SERVER_HOST, API_SERVER_PORT, __version__
from contextlib import asynccontextmanager
from core.library import LibraryActions
from core.logging import app_logger
from core.session import PlaybackSession
from eliot import log_message, start_action
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware


def create_app(session: PlaybackSession | None = None, library: LibraryActions | None = None) -> FastAPI:
    """Create the API application.

    Args:
        session: Playback session to serve; built from configuration at startup if omitted
        library: Library actions client; built from configuration if omitted

    Returns:
        The FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        with start_action(app_logger, "application_startup"):
            app.state.start_time = time.time()
            app.state.session = session or build_session()
            app.state.library = library or build_library(app.state.session.notifications)

            connections = ConnectionManager()
            connections.loop = asyncio.get_running_loop()
            app.state.connections = connections
            app.state.session.add_state_listener(lambda snapshot: emit_player_state(connections, snapshot))
            app.state.session.notifications.subscribe(lambda notification: emit_notification(connections, notification))

            log_message(message_type="application_ready", message=f"flowr player v{__version__} started")

        yield

        log_message(message_type="application_shutdown", message="flowr player shutting down")
        app.state.session.shutdown()
        if session is None:
            app.state.session.device.release()

    app = FastAPI(
        title="flowr Player API",
        description="Playback session API for the flowr player",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(player_router, prefix="/api")
    app.include_router(queue_router, prefix="/api")
    app.include_router(library_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(stream_router, prefix="/api")
    app.include_router(websocket_router)

    @app.get("/api/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        snapshot = request.app.state.session.snapshot()
        uptime = int(time.time() - request.app.state.start_time)
        return {
            "status": "healthy",
            "version": __version__,
            "player_state": snapshot.state,
            "uptime_seconds": uptime,
        }

    return app


def run():
    """Entry point for running the server."""
    import uvicorn

    uvicorn.run(
        "backend.main:create_app",
        factory=True,
        host=API_SERVER_HOST,
        port=API_SERVER_PORT,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    run()
