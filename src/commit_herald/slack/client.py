from typing import Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from ..config import get_settings
from ..log import get_logger
from ..rendering.chat_format import split_message
from .post_blocks import build_post_payload

logger = get_logger("slack_client")
settings = get_settings()


def _is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, SlackApiError) and exc.response.get("error") == "ratelimited"


class SlackClientWrapper:
    def __init__(self, client: Optional[AsyncWebClient] = None):
        self.client = client or AsyncWebClient(token=settings.SLACK_BOT_TOKEN)

    @retry(
        retry=retry_if_exception(_is_rate_limited),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def post_payload(self, payload: dict):
        """
        Post a prepared chat.postMessage payload. Rate limits are retried.
        """
        try:
            await self.client.chat_postMessage(**payload)
        except SlackApiError as e:
            if e.response.get("error") == "ratelimited":
                logger.warning("Slack rate limited, retrying...")
            else:
                logger.error(f"Slack API error: {e.response.get('error')}")
            raise

    async def send_message(self, channel_id: str, text: str, thread_ts: Optional[str] = None):
        """
        Send text to a channel, split into several messages when it exceeds MAX_MESSAGE_LENGTH.
        """
        for chunk in split_message(text, settings.MAX_MESSAGE_LENGTH):
            await self.post_payload(build_post_payload(channel=channel_id, text=chunk, thread_ts=thread_ts))

slack_client = SlackClientWrapper()
