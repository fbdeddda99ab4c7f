"""
WebSocket router for live dashboard updates.

Provides a WebSocket endpoint that:
1. Authenticates the operator from the same session as HTTP requests
2. Keeps the connection open with a ping/pong heartbeat
3. Receives ``refresh`` events when the backend reports a change
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from salesdesk.core.auth_session import build_auth_session
from salesdesk.core.websocket import manager

router = APIRouter(prefix="/ws", tags=["WebSocket"])


@router.websocket("/changes")
async def websocket_changes(websocket: WebSocket):
    """
    Change feed for open dashboards.

    The server pushes ``{"type": "refresh", "table": <name>}`` after the
    snapshot has been rebuilt; the client reloads its lists.
    """
    session = build_auth_session(websocket)
    if session.access_denied():
        await websocket.close(code=4003, reason="Access denied")
        return
    identity = session.current_user()
    if identity is None:
        await websocket.close(code=4001, reason="Authentication required")
        return

    await manager.connect(websocket, identity.email)

    try:
        while True:
            try:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text("pong")
            except WebSocketDisconnect:
                break
    finally:
        await manager.disconnect(websocket, identity.email)
