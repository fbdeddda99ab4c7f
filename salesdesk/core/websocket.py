"""
WebSocket connection manager for live dashboard updates.

Dashboards stay connected while open; when the backend reports a change the
server tells every connected dashboard to reload its lists.
"""

from typing import Dict, Set
import asyncio
import json

from fastapi import WebSocket


class ConnectionManager:
    """Manages WebSocket connections per operator email."""

    def __init__(self):
        # operator email -> set of active WebSocket connections
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, operator: str):
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections.setdefault(operator, set()).add(websocket)

    async def disconnect(self, websocket: WebSocket, operator: str):
        """Remove a WebSocket connection."""
        async with self._lock:
            if operator in self._connections:
                self._connections[operator].discard(websocket)
                if not self._connections[operator]:
                    del self._connections[operator]

    async def broadcast(self, message: dict):
        """Send a message to every connected dashboard."""
        async with self._lock:
            targets = [
                (operator, ws)
                for operator, sockets in self._connections.items()
                for ws in sockets
            ]

        if not targets:
            return

        data = json.dumps(message)
        closed = []

        for operator, ws in targets:
            try:
                await ws.send_text(data)
            except Exception:
                # Connection closed or errored
                closed.append((operator, ws))

        for operator, ws in closed:
            await self.disconnect(ws, operator)

    def get_total_connections(self) -> int:
        """Get total number of active connections across all operators."""
        return sum(len(conns) for conns in self._connections.values())


# Singleton instance
manager = ConnectionManager()
