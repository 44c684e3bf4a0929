from __future__ import annotations

import asyncio

from fastapi import WebSocket, WebSocketDisconnect

from glucose_wars.core.models import SessionState

# Raised by send_json on sockets the peer already dropped.
_GONE = (WebSocketDisconnect, RuntimeError, OSError)


def snapshot_payload(state: SessionState) -> dict[str, object]:
    return {"type": "session_updated", **state.model_dump(mode="json")}


class SessionWebSocketHub:
    """Pushes session snapshots to every socket watching that session.

    One room per session_id. Rooms are in-process only, like the session
    clocks they mirror.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, list[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._rooms.setdefault(session_id, []).append(websocket)

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._drop(session_id, [websocket])

    async def broadcast(self, session_id: str, payload: dict[str, object]) -> None:
        async with self._lock:
            room = list(self._rooms.get(session_id, ()))
        if not room:
            return

        results = await asyncio.gather(*(ws.send_json(payload) for ws in room), return_exceptions=True)
        gone: list[WebSocket] = []
        for ws, result in zip(room, results):
            if isinstance(result, _GONE):
                gone.append(ws)
            elif isinstance(result, BaseException):
                raise result
        if gone:
            async with self._lock:
                self._drop(session_id, gone)

    def _drop(self, session_id: str, sockets: list[WebSocket]) -> None:
        room = self._rooms.get(session_id)
        if room is None:
            return
        room[:] = [ws for ws in room if ws not in sockets]
        if not room:
            del self._rooms[session_id]


hub = SessionWebSocketHub()


async def broadcast_snapshot(state: SessionState) -> None:
    """Clock subscriber: fan the new snapshot out to the session's room."""

    await hub.broadcast(state.session_id, snapshot_payload(state))
