# mediafetch/api/events.py
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


async def _handle_message(websocket: WebSocket, raw: str) -> None:
    try:
        message = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed client message: %.200s", raw)
        return
    if not isinstance(message, dict):
        logger.warning("Ignoring non-object client message: %.200s", raw)
        return

    if message.get("type") == "cancel":
        await websocket.app.state.job_manager.cancel()
    else:
        logger.warning("Ignoring unknown client message type: %r", message.get("type"))


@router.websocket("/")
@router.websocket("/ws")
async def progress_events(websocket: WebSocket):
    hub = websocket.app.state.hub
    await websocket.accept()
    hub.register(websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                raw = (frame.get("bytes") or b"").decode("utf-8", errors="replace")
            await _handle_message(websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        hub.unregister(websocket)
