"""WebSocket handler for real-time job updates."""
import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Set
from fastapi import WebSocket, WebSocketDisconnect

from api.models.job import JobModel
from shared.config import settings

SnapshotGetter = Callable[[str], Awaitable[Optional[Dict[str, Any]]]]


class ConnectionManager:
    """Manages WebSocket connections for job updates."""

    def __init__(self):
        # Map of job_id to set of WebSocket connections
        self.active_connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, job_id: str):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.setdefault(job_id, set()).add(websocket)

    def disconnect(self, websocket: WebSocket, job_id: str):
        """Remove a WebSocket connection."""
        if job_id in self.active_connections:
            self.active_connections[job_id].discard(websocket)
            if not self.active_connections[job_id]:
                del self.active_connections[job_id]

    async def send_to_job(self, job_id: str, message: dict):
        """Send message to all connections watching a specific job."""
        if job_id in self.active_connections:
            disconnected = set()
            for connection in list(self.active_connections[job_id]):
                try:
                    await connection.send_json(message)
                except Exception:
                    disconnected.add(connection)

            # Clean up disconnected clients
            for conn in disconnected:
                self.disconnect(conn, job_id)

    async def publish_job_update(self, job: Dict[str, Any]):
        """Forward a job snapshot to the clients watching that job."""
        await self.send_to_job(job["job_id"], job_update_message(job))


def job_update_message(job: Dict[str, Any]) -> dict:
    """Serialize a job record into a WebSocket update message."""
    return {"type": "job_update", **JobModel(**job).model_dump(mode="json")}


# Global connection manager
manager = ConnectionManager()

# Close code sent when the requested job does not exist
UNKNOWN_JOB_CLOSE_CODE = 4404


async def websocket_endpoint(websocket: WebSocket, job_id: str, get_snapshot: SnapshotGetter):
    """
    WebSocket endpoint for job updates.

    The connection is registered before the current snapshot is read, so a
    write landing while the socket is being accepted is either part of the
    snapshot or pushed afterwards.
    """
    await manager.connect(websocket, job_id)

    snapshot = await get_snapshot(job_id)
    if snapshot is None:
        manager.disconnect(websocket, job_id)
        await websocket.close(code=UNKNOWN_JOB_CLOSE_CODE, reason="Job not found")
        return

    try:
        await websocket.send_json(job_update_message(snapshot))
        while True:
            # Keep connection alive with heartbeat
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.ws_heartbeat_interval
                )
                # Handle ping/pong
                if data == "ping":
                    await websocket.send_text("pong")
            except asyncio.TimeoutError:
                # Send heartbeat
                await websocket.send_json({"type": "heartbeat"})
    except WebSocketDisconnect:
        manager.disconnect(websocket, job_id)
