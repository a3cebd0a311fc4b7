import asyncio
import json
from typing import Optional, Union

from pydantic import ValidationError

from backend import Connection, RoomRegistry
from constants import PEER_SEND_TIMEOUT
from schemas.signaling import SignalEnvelope
from logging_config import get_logger

logger = get_logger(__name__)


class SignalingRelay:
    """Groups connections into meetings and forwards messages between members.

    Delivery is at-most-once: nothing is acknowledged, retried or reported
    back to the sender.
    """

    def __init__(self, registry: Optional[RoomRegistry] = None, send_timeout: float = PEER_SEND_TIMEOUT):
        self.registry = registry if registry is not None else RoomRegistry()
        self.send_timeout = send_timeout

    async def on_connect(self, websocket) -> Connection:
        return await self.registry.register(websocket)

    async def on_message(self, connection: Connection, raw: Union[str, bytes]):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning(f"Invalid message from connection {connection.id}: {e}")
                return

        try:
            envelope = SignalEnvelope.model_validate(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON from connection {connection.id}: {e}")
            return
        except ValidationError as e:
            logger.warning(f"Invalid message from connection {connection.id}: {e.errors()[0]['msg']}")
            return

        if envelope.is_join:
            await self.registry.join(
                connection,
                envelope.meeting_id,
                envelope.participant_id or connection.id,
            )
            return

        # Target room comes from the message, not from the sender's membership
        members = await self.registry.members(envelope.meeting_id)
        if members is None:
            logger.debug(
                f"Dropped {envelope.type!r} message from connection {connection.id}: "
                f"no room {envelope.meeting_id!r}"
            )
            return

        await self.forward(connection, envelope.meeting_id, raw, members)

    async def forward(self, sender: Connection, meeting_id: str, text: str, members):
        peers = [member for member in members if member is not sender and member.is_open]
        if not peers:
            logger.debug(f"No open peers for message from {sender.id} in room {meeting_id}")
            return

        # A stalled peer costs the sender at most send_timeout
        results = await asyncio.gather(
            *(asyncio.wait_for(peer.send(text), self.send_timeout) for peer in peers),
            return_exceptions=True,
        )
        delivered = 0
        for peer, result in zip(peers, results):
            if isinstance(result, asyncio.TimeoutError):
                logger.warning(f"Timed out sending to connection {peer.id} in room {meeting_id}")
            elif isinstance(result, BaseException):
                logger.warning(f"Error sending to connection {peer.id} in room {meeting_id}: {result}")
            else:
                delivered += 1
        logger.debug(f"Forwarded message from {sender.id} to {delivered}/{len(peers)} peers in room {meeting_id}")

    async def on_close(self, connection: Connection):
        await self.registry.remove(connection)
        logger.info(f"Connection {connection.id} closed")
