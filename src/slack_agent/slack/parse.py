from typing import Any, Dict, Optional
from ..domain.message import InboundMessage

SUPPORTED_EVENT_TYPES = ("message", "app_mention")

IGNORED_SUBTYPES = (
    "bot_message",
    "message_changed",
    "message_deleted",
    "channel_join",
    "channel_leave",
)

def unwrap_event(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Accept either an Events API envelope or the inner event itself."""
    if payload.get("type") == "event_callback":
        return payload.get("event", {})
    return payload

def parse_event(payload: Dict[str, Any], bot_user_id: str = "") -> Optional[InboundMessage]:
    """
    Normalize a Slack event into an InboundMessage.
    Returns None for unsupported kinds and anything authored by a bot (including us).
    """
    event = unwrap_event(payload)

    # 1. Only plain messages and mentions
    if event.get("type") not in SUPPORTED_EVENT_TYPES:
        return None

    # 2. Ignore bots
    if event.get("bot_id"):
        return None
    if event.get("subtype") in IGNORED_SUBTYPES:
        return None

    user = event.get("user")
    if not user or (bot_user_id and user == bot_user_id):
        return None

    channel = event.get("channel")
    if not channel:
        return None

    # Reply in the existing thread, or start one under the triggering message
    thread_ts = event.get("thread_ts") or event.get("ts") or ""

    return InboundMessage(
        user_id=user,
        channel_id=channel,
        text=event.get("text", "") or "",
        thread_ts=thread_ts,
    )
