import asyncio
import uuid
from typing import Dict, List, Optional

from starlette.websockets import WebSocketState

from logging_config import get_logger

logger = get_logger(__name__)


class Connection:
    """One accepted client channel and the room it has joined, if any."""

    def __init__(self, websocket, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        self.meeting_id: Optional[str] = None
        self.participant_id: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, text: str):
        await self.websocket.send_text(text)

    def __repr__(self):
        return f"Connection(id={self.id!r}, meeting_id={self.meeting_id!r}, participant_id={self.participant_id!r})"


class RoomRegistry:
    """In-memory map of meeting id to member connections.

    Every mutation and snapshot goes through a single asyncio.Lock so that
    concurrent joins and closes across rooms cannot lose updates.
    """

    def __init__(self):
        # Format: {connection_id: Connection}
        self.connections: Dict[str, Connection] = {}
        # Format: {meeting_id: {connection_id: Connection}}
        self.rooms: Dict[str, Dict[str, Connection]] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket) -> Connection:
        connection = Connection(websocket)
        async with self._lock:
            self.connections[connection.id] = connection
        logger.debug(f"Registered connection {connection.id} (live connections: {len(self.connections)})")
        return connection

    async def join(self, connection: Connection, meeting_id: str, participant_id: str):
        async with self._lock:
            if connection.meeting_id is not None and connection.meeting_id != meeting_id:
                self._discard(connection)
            connection.meeting_id = meeting_id
            connection.participant_id = participant_id
            members = self.rooms.setdefault(meeting_id, {})
            members[connection.id] = connection
            logger.info(
                f"Connection {connection.id} joined room {meeting_id} as {participant_id} "
                f"(members: {len(members)})"
            )

    async def members(self, meeting_id) -> Optional[List[Connection]]:
        """Snapshot of a room's members, or None when the room does not exist."""
        if not isinstance(meeting_id, str):
            return None
        async with self._lock:
            members = self.rooms.get(meeting_id)
            if members is None:
                return None
            return list(members.values())

    async def remove(self, connection: Connection):
        async with self._lock:
            self._discard(connection)
            self.connections.pop(connection.id, None)

    def _discard(self, connection: Connection):
        meeting_id = connection.meeting_id
        if meeting_id is None:
            return
        members = self.rooms.get(meeting_id)
        if members is not None and members.get(connection.id) is connection:
            del members[connection.id]
            logger.info(f"Connection {connection.id} left room {meeting_id} (members: {len(members)})")
            if not members:
                del self.rooms[meeting_id]
                logger.info(f"Room {meeting_id} is empty, removed")

    def room_ids(self) -> List[str]:
        return list(self.rooms)

    def room_size(self, meeting_id: str) -> int:
        return len(self.rooms.get(meeting_id, {}))

    def __contains__(self, meeting_id) -> bool:
        return isinstance(meeting_id, str) and meeting_id in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)
