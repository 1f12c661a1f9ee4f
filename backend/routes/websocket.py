"""WebSocket endpoint for real-time player events."""

import asyncio
import json
from core.models import Notification, PlaybackSnapshot
from datetime import datetime
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import Any

router = APIRouter(tags=["websocket"])


class ConnectionManager:
    """Manages WebSocket connections for broadcasting events."""

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.loop: asyncio.AbstractEventLoop | None = None

    async def connect(self, websocket: WebSocket):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        """Remove a WebSocket connection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, event: str, data: dict[str, Any]):
        """Broadcast an event to all connected clients."""
        message = {
            "event": event,
            "data": data,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
        message_json = json.dumps(message)

        # Send to all connections, removing any that fail
        disconnected = []
        for connection in self.active_connections:
            try:
                await connection.send_text(message_json)
            except Exception:
                disconnected.append(connection)

        for conn in disconnected:
            self.disconnect(conn)

    def broadcast_threadsafe(self, event: str, data: dict[str, Any]) -> None:
        """Schedule a broadcast from any thread (session callbacks run off-loop)."""
        if self.loop is None or self.loop.is_closed() or not self.active_connections:
            return
        asyncio.run_coroutine_threadsafe(self.broadcast(event, data), self.loop)


def get_connection_manager(websocket: WebSocket) -> ConnectionManager:
    """Get the application's connection manager."""
    return websocket.app.state.connections


def emit_player_state(manager: ConnectionManager, snapshot: PlaybackSnapshot) -> None:
    """Emit player:state event."""
    manager.broadcast_threadsafe("player:state", snapshot.model_dump(mode="json"))


def emit_notification(manager: ConnectionManager, notification: Notification) -> None:
    """Emit player:notification event (the client shows it as a toast)."""
    manager.broadcast_threadsafe("player:notification", notification.model_dump(mode="json"))


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for real-time events."""
    manager = get_connection_manager(websocket)
    await manager.connect(websocket)
    try:
        while True:
            # Keep connection alive, handle any incoming messages
            try:
                data = await asyncio.wait_for(websocket.receive_text(), timeout=30.0)
                # Echo back for ping/pong
                if data == "ping":
                    await websocket.send_text("pong")
            except TimeoutError:
                # Send heartbeat
                await websocket.send_text(json.dumps({"event": "heartbeat", "timestamp": datetime.utcnow().isoformat() + "Z"}))
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception:
        manager.disconnect(websocket)
