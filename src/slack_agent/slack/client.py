from typing import Optional
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from ..domain.bot import BotIdentity
from ..errors import SinkPostFailure
from ..log import get_logger

logger = get_logger("slack_client")

class SlackClientWrapper:
    def __init__(self, token: Optional[str] = None, client: Optional[WebClient] = None):
        self.client = client or WebClient(token=token)

    def post_message(self, channel_id: str, text: str, thread_ts: str = ""):
        """
        Posts a message, threaded when thread_ts is set.
        Failures are raised as SinkPostFailure and are not retried.
        """
        kwargs = {"channel": channel_id, "text": text}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        try:
            self.client.chat_postMessage(**kwargs)
        except SlackApiError as e:
            error = e.response.get("error", str(e)) if e.response is not None else str(e)
            logger.error(f"Slack API error: {error}")
            raise SinkPostFailure(channel_id, error) from e

    @retry(
        retry=retry_if_exception_type(SlackApiError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def resolve_bot_identity(self) -> BotIdentity:
        """Look up our own user ID via auth.test (retried, runs once at startup)."""
        response = self.client.auth_test()
        return BotIdentity(user_id=response["user_id"])
