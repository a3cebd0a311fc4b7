from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from constants import RELAY_PATH
from logging_config import get_logger

logger = get_logger(__name__)

signaling_router = APIRouter(tags=["signaling"])


@signaling_router.websocket(RELAY_PATH)
async def signaling_endpoint(websocket: WebSocket):
    """Relay endpoint: join a meeting, then exchange JSON messages with its other members.

    Nothing is ever sent back to the sender of a message.
    """
    relay = websocket.app.state.signaling_relay
    await websocket.accept()
    connection = await relay.on_connect(websocket)
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"WebSocket connection {connection.id} accepted from {client_host}")

    try:
        message_count = 0
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected for connection {connection.id} (code {message.get('code')})")
                break

            payload = message.get("text")
            if payload is None:
                payload = message.get("bytes")
            if payload is None:
                continue

            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {connection.id}")
            await relay.on_message(connection, payload)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for connection {connection.id}")
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.id}: {e}", exc_info=True)
    finally:
        await relay.on_close(connection)
        if connection.is_open:
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")
