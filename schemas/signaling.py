from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class SignalEnvelope(BaseModel):
    """Routing fields of a relayed message. Everything else is opaque payload."""

    model_config = ConfigDict(extra="allow")

    type: Optional[Any] = None
    meeting_id: Optional[Any] = Field(default=None, alias="meetingId")
    sender: Optional[Any] = Field(default=None, alias="from")

    @property
    def is_join(self) -> bool:
        return self.type == "join" and isinstance(self.meeting_id, str) and self.meeting_id != ""

    @property
    def participant_id(self) -> Optional[str]:
        if isinstance(self.sender, str) and self.sender:
            return self.sender
        return None
