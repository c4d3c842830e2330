"""
Chirpboard Backend: Live Update Fan-out
=======================================

What:  Tracks open WebSocket listeners and pushes new entries to them.
How:   `LiveUpdateHub` holds the set of accepted sockets. `broadcast()`
       iterates a snapshot of that set, so a listener that connects while a
       broadcast is running only sees later entries. Sockets that are no
       longer connected, or whose send fails, are dropped. Nothing is
       retried or acknowledged.
Who:   The /ws route (connect, disconnect, broadcast) and /health (count).

Frame format (client → server), one JSON object per text frame:
    {"message": "hello", "username": "rob"}
Broadcast format (server → every listener):
    {"id": "...", "message": "hello", "username": "rob", "likes": 0}
"""

import json
import logging
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from chirpboard.exceptions import BadTypeError
from chirpboard.middleware.strong_params import FieldKind, check_field_shapes

logger = logging.getLogger(__name__)

LIVE_FRAME_FIELDS = {"message": FieldKind.STRING, "username": FieldKind.STRING}


def parse_live_frame(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Decode one inbound frame into {"message", "username"}.

    Returns None (frame is dropped) when the text is not JSON, fails the
    Field-Shape Validator, or has an empty message or username.
    """
    if raw is None:
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.debug("Live frame dropped: not JSON")
        return None

    try:
        params = check_field_shapes(LIVE_FRAME_FIELDS, payload)
    except BadTypeError as exc:
        logger.debug("Live frame dropped: %s (%s)", exc.message, ", ".join(exc.fields))
        return None

    if params["message"] == "" or params["username"] == "":
        logger.debug("Live frame dropped: empty message or username")
        return None
    return params


class LiveUpdateHub:
    """In-process registry of live listeners. Used only from the event loop."""

    def __init__(self):
        self._listeners: Set[WebSocket] = set()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._listeners.add(websocket)
        logger.info("Live listener connected (%d open)", self.listener_count)

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._listeners:
            self._listeners.discard(websocket)
            logger.info("Live listener disconnected (%d open)", self.listener_count)

    async def broadcast(self, payload: Dict[str, Any]) -> int:
        """
        Send `payload` as JSON to every listener open right now.

        Returns:
            Number of listeners the payload was delivered to.
        """
        delivered = 0
        for websocket in list(self._listeners):
            if (
                websocket.client_state != WebSocketState.CONNECTED
                or websocket.application_state != WebSocketState.CONNECTED
            ):
                self.disconnect(websocket)
                continue
            try:
                await websocket.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.warning("Live send failed, dropping listener: %s", str(e))
                self.disconnect(websocket)
        logger.debug("Broadcast delivered to %d listener(s)", delivered)
        return delivered
