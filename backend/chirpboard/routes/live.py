"""
Chirpboard Backend: Live Channel
================================

What:  WebSocket endpoint `/ws`. Every connected client is a listener;
       any client may also post an entry by sending a JSON text frame.
How:   Each frame is parsed with `parse_live_frame()`. Valid frames create
       an entry through ContentService in their own database session, and
       once the session has committed the entry is broadcast to all open
       listeners. Bad frames, unknown authors and store failures drop only
       that frame, without a reply; the sender stays connected.
"""

import logging

from fastapi import APIRouter, WebSocket
from sqlalchemy.exc import SQLAlchemyError

from chirpboard.database import Database
from chirpboard.exceptions import ChirpboardError
from chirpboard.services.content_service import content_service
from chirpboard.services.live_updates import LiveUpdateHub, parse_live_frame

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Live"])


@router.websocket("/ws")
async def live_channel(websocket: WebSocket) -> None:
    hub: LiveUpdateHub = websocket.app.state.live_hub
    database: Database = websocket.app.state.database

    await hub.connect(websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            params = parse_live_frame(frame.get("text"))
            if params is None:
                continue

            async with database.session() as db:
                try:
                    entry = await content_service.post_entry(db, params["message"], params["username"])
                    await db.commit()
                except ChirpboardError as exc:
                    await db.rollback()
                    logger.warning("Live post could not be made: %s", exc.message)
                    continue
                except SQLAlchemyError as e:
                    await db.rollback()
                    logger.error("Live post failed in the store: %s", str(e))
                    continue

            await hub.broadcast(entry.to_broadcast())
    finally:
        hub.disconnect(websocket)
