"""Bot identity and mention detection.

A message addresses the bot when it contains the exact `<@BOT_ID>` token,
or when it was posted in a direct message channel (IDs starting with "D").
"""

import re
from pydantic import BaseModel, ConfigDict

DIRECT_MESSAGE_PREFIX = "D"

MENTION_RE = re.compile(r"<@[A-Z0-9_]+>")

class BotIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str

    def is_mentioned(self, text: str) -> bool:
        return is_mentioned(self.user_id, text)

def mention_token(bot_user_id: str) -> str:
    return f"<@{bot_user_id}>"

def is_mentioned(bot_user_id: str, text: str) -> bool:
    # The closing ">" is part of the token, so <@U123456> never matches U12345.
    if not bot_user_id or not text:
        return False
    return mention_token(bot_user_id) in text

def is_direct_message(channel_id: str) -> bool:
    return bool(channel_id) and channel_id.startswith(DIRECT_MESSAGE_PREFIX)

def is_addressed(bot_user_id: str, channel_id: str, text: str) -> bool:
    return is_mentioned(bot_user_id, text) or is_direct_message(channel_id)

def clean_message_text(text: str) -> str:
    """Remove every mention token and surrounding whitespace from the prompt text."""
    return MENTION_RE.sub("", text or "").strip()
