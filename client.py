import inspect
import json
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Union

import websockets
from websockets.exceptions import ConnectionClosed

from logging_config import get_logger

logger = get_logger(__name__)

# Plain functions and coroutine functions are both accepted
MessageCallback = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]


class SignalingClient:
    """Asyncio client for the signaling relay.

    Joins one meeting on connect and dispatches every inbound JSON message to
    the registered callbacks.

    Example:
        async with SignalingClient("ws://localhost:8080", "m1", "alice") as client:
            client.on_message(handle)
            await client.send({"type": "offer", "sdp": sdp})
            await client.listen()
    """

    def __init__(self, url: str, meeting_id: str, participant_id: Optional[str] = None):
        self.url = url
        self.meeting_id = meeting_id
        self.participant_id = participant_id
        self.ws = None
        self.callbacks: Set[MessageCallback] = set()

    @property
    def connected(self) -> bool:
        return self.ws is not None

    async def connect(self):
        if self.ws is not None:
            await self.close()
        self.ws = await websockets.connect(self.url)
        logger.info(f"Connected to {self.url}, joining meeting {self.meeting_id}")
        join = {"type": "join", "meetingId": self.meeting_id}
        if self.participant_id:
            join["from"] = self.participant_id
        await self.send(join)

    async def send(self, message: Dict[str, Any]):
        if self.ws is None:
            logger.debug(f"Not connected, dropping {message.get('type')!r} message")
            return
        payload = dict(message)
        payload.setdefault("meetingId", self.meeting_id)
        await self.ws.send(json.dumps(payload))

    def on_message(self, callback: MessageCallback) -> Callable[[], None]:
        self.callbacks.add(callback)
        return lambda: self.callbacks.discard(callback)

    async def listen(self):
        """Dispatch inbound messages until the connection closes."""
        if self.ws is None:
            return
        try:
            async for raw in self.ws:
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError as e:
                    logger.error(f"Invalid message from relay: {e}")
                    continue
                await self._dispatch(message)
        except ConnectionClosed as e:
            logger.info(f"Connection to {self.url} closed: {e}")

    async def _dispatch(self, message: Dict[str, Any]):
        for callback in list(self.callbacks):
            try:
                result = callback(message)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Message callback {callback!r} failed: {e}", exc_info=True)

    async def close(self):
        if self.ws is not None:
            ws, self.ws = self.ws, None
            await ws.close()
            logger.info(f"Closed connection to {self.url}")
        self.callbacks.clear()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
