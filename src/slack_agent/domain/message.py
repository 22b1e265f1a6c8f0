"""Pydantic models for inbound messages and agent results."""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class InboundMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    channel_id: str
    text: str = ""
    thread_ts: str = ""
    received_at: datetime = Field(default_factory=_utcnow)

    def fingerprint(self) -> str:
        """Key shared by logically identical deliveries of the same message."""
        return f"{self.user_id}:{self.channel_id}:{self.thread_ts}:{self.text}"

class DispatchResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    response: str = ""
    error: Optional[Exception] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None
