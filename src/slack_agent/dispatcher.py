"""Message dispatcher: filter inbound Slack events and hand them to the agent.

Intake (normalize, dedup, mention check) runs on the caller's thread and is
cheap. Generation runs on its own daemon thread per message so a slow agent
never blocks the event stream. There is no cap on concurrent dispatches.
"""

import threading
from typing import Any, Dict, Optional
from .agent.client import AgentClient
from .config import DEGRADED_MESSAGE, Settings
from .domain.bot import BotIdentity, clean_message_text, is_addressed
from .domain.message import InboundMessage
from .errors import SinkPostFailure
from .log import get_logger
from .slack.client import SlackClientWrapper
from .slack.parse import parse_event
from .store.dedup import DedupGuard

logger = get_logger("dispatcher")

class Dispatcher:
    def __init__(
        self,
        bot: BotIdentity,
        agent: AgentClient,
        sink: SlackClientWrapper,
        guard: Optional[DedupGuard] = None,
        degraded_message: str = DEGRADED_MESSAGE,
    ):
        self.bot = bot
        self.agent = agent
        self.sink = sink
        self.guard = guard or DedupGuard()
        self.degraded_message = degraded_message

    def handle_event(self, event: Dict[str, Any]) -> Optional[threading.Thread]:
        """
        Entry point for raw Slack events (already acknowledged by the transport).
        Returns the dispatch thread, or None if the event was dropped.
        """
        message = parse_event(event, self.bot.user_id)
        if message is None:
            return None
        return self.accept(message)

    def accept(self, message: InboundMessage) -> Optional[threading.Thread]:
        if not self.guard.should_process(message.fingerprint()):
            return None

        if not is_addressed(self.bot.user_id, message.channel_id, message.text):
            logger.debug(f"Not addressed, ignoring message in {message.channel_id}")
            return None

        logger.info(f"Handling message from user {message.user_id} in channel {message.channel_id}")
        thread = threading.Thread(
            target=self._run,
            args=(message,),
            name=f"dispatch-{message.thread_ts or message.channel_id}",
            daemon=True,
        )
        thread.start()
        return thread

    def process(self, message: InboundMessage):
        """
        Generate and post the reply for one accepted message.
        Raises SinkPostFailure if Slack rejects the post.
        """
        prompt = clean_message_text(message.text)
        if not prompt:
            logger.warning(f"Prompt is empty after removing mentions from: '{message.text}'")

        result = self.agent.generate(prompt, message)
        if result.is_error:
            logger.error(f"Error generating response: {result.error}")
            self.sink.post_message(message.channel_id, self.degraded_message, message.thread_ts)
            return

        # Empty response means the agent posted on its own (delegate mode)
        if result.response:
            self.sink.post_message(message.channel_id, result.response, message.thread_ts)

    def _run(self, message: InboundMessage):
        try:
            self.process(message)
        except SinkPostFailure as e:
            logger.error(f"Error handling message: {e}")
        except Exception:
            logger.exception("Unexpected error while handling message")

def build_dispatcher(settings: Settings, sink: Optional[SlackClientWrapper] = None) -> Dispatcher:
    """Wire a Dispatcher from validated settings, resolving the bot identity via Slack."""
    sink = sink or SlackClientWrapper(token=settings.SLACK_BOT_TOKEN)
    bot = sink.resolve_bot_identity()
    logger.info(f"Bot user ID: {bot.user_id}")
    return Dispatcher(
        bot=bot,
        agent=AgentClient.from_settings(settings),
        sink=sink,
        degraded_message=settings.DEGRADED_MESSAGE,
    )
