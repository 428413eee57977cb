import json
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from app.infrastructure.realtime import ConnectionRegistry
from shared.core import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["realtime"])

@router.websocket("/ws")
async def realtime_updates(websocket: WebSocket):
    """Push channel for package updates and support chat messages."""
    registry: ConnectionRegistry = websocket.app.state.connections
    await websocket.accept()
    registry.add(websocket)
    try:
        await websocket.send_json({
            "type": "connected",
            "data": {"message": "Connected to Shipnix-Express real-time updates"},
        })
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "data": {"message": "Invalid JSON"}})
                continue
            if isinstance(message, dict) and message.get("type") == "subscribe":
                await websocket.send_json({
                    "type": "subscribed",
                    "data": {"message": "Subscribed to package updates"},
                })
            else:
                logger.debug(f"Ignoring WebSocket message: {raw[:100]}")
    except WebSocketDisconnect:
        pass
    finally:
        registry.remove(websocket)
