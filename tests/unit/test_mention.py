import pytest
from slack_agent.domain.bot import (
    BotIdentity,
    clean_message_text,
    is_addressed,
    is_direct_message,
    is_mentioned,
)

@pytest.mark.parametrize("text,expected", [
    ("<@U12345> hello", True),
    ("Hey <@U12345> how are you?", True),
    ("What do you think <@U12345>", True),
    ("Hello world", False),
    ("<@U98765> hello", False),
    ("<@U123456> hello", False),
    ("U12345 hello", False),
    ("", False),
])
def test_is_mentioned(text, expected):
    """
    WHY: The bot must only answer when its exact mention token appears.
    HOW: Check a set of texts against bot ID U12345.
    EXPECTED: True only for texts containing `<@U12345>`; a longer ID like U123456 must not match.
    """
    assert is_mentioned("U12345", text) is expected

def test_bot_identity_delegates_to_is_mentioned():
    bot = BotIdentity(user_id="U12345")
    assert bot.is_mentioned("<@U12345> hi")
    assert not bot.is_mentioned("<@U1234> hi")

def test_direct_message_channels():
    """
    WHY: In a DM every message is meant for the bot, even without a mention.
    HOW: Check channel IDs with and without the `D` prefix.
    EXPECTED: Only `D...` channels count as direct messages and are treated as addressed.
    """
    assert is_direct_message("D0123")
    assert not is_direct_message("C0123")
    assert not is_direct_message("")
    assert is_addressed("BOT", "D0123", "no mention here")
    assert not is_addressed("BOT", "C0123", "no mention here")
    assert is_addressed("BOT", "C0123", "<@BOT> yo")

def test_clean_message_text():
    """
    WHY: The agent should receive the question, not Slack's mention markup.
    HOW: Clean texts containing one or more mention tokens.
    EXPECTED: All `<@ID>` tokens removed and surrounding whitespace trimmed.
    """
    assert clean_message_text("<@U12345> what's up?") == "what's up?"
    assert clean_message_text("ask <@U1> and <@U_BOT2> now ") == "ask  and  now"
    assert clean_message_text("<@U12345>") == ""
