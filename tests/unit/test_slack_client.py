import pytest
from unittest.mock import AsyncMock, MagicMock
from slack_sdk.errors import SlackApiError
from tenacity import wait_none

from commit_herald.slack.client import SlackClientWrapper
from commit_herald.slack.parse import parse_event


def _wrapper():
    client = MagicMock()
    client.chat_postMessage = AsyncMock(return_value={"ok": True})
    return SlackClientWrapper(client=client), client.chat_postMessage


async def test_send_message_posts_plain_mrkdwn(settings):
    """
    WHY: Verify that our wrapper calls the Slack SDK with the right parameters.
    HOW: Mock `chat_postMessage`; send a short message.
    EXPECTED: One call with channel, text and unfurling disabled.
    """
    wrapper, mock_post = _wrapper()

    await wrapper.send_message("C1", "Hello World")

    mock_post.assert_awaited_once_with(
        channel="C1",
        text="Hello World",
        mrkdwn=True,
        unfurl_links=False,
        unfurl_media=False,
    )


async def test_send_message_splits_long_text(settings):
    settings.MAX_MESSAGE_LENGTH = 10
    wrapper, mock_post = _wrapper()

    await wrapper.send_message("C1", "line one\nline two\nthree", thread_ts="1.2")

    texts = [c.kwargs["text"] for c in mock_post.await_args_list]
    assert texts == ["line one", "line two", "three"]
    assert all(c.kwargs["thread_ts"] == "1.2" for c in mock_post.await_args_list)


async def test_rate_limit_is_retried(settings):
    """
    WHY: Slack rate limits bots; a 429 should not lose a reply.
    HOW: First call raises "ratelimited", second succeeds. Retry wait disabled.
    EXPECTED: Two calls, no exception.
    """
    wrapper, mock_post = _wrapper()
    mock_post.side_effect = [SlackApiError("ratelimited", {"error": "ratelimited"}), {"ok": True}]

    await SlackClientWrapper.post_payload.retry_with(wait=wait_none())(wrapper, {"channel": "C1", "text": "hi"})

    assert mock_post.await_count == 2


async def test_other_slack_errors_are_not_retried(settings):
    wrapper, mock_post = _wrapper()
    mock_post.side_effect = SlackApiError("auth_error", {"error": "invalid_auth"})

    with pytest.raises(SlackApiError):
        await wrapper.send_message("C1", "Fail")

    assert mock_post.await_count == 1


def test_parse_event_keeps_commands_in_channel():
    event = {"channel": "C1", "user": "U1", "text": "  !run ", "ts": "1.0"}
    assert parse_event(event, "C1") == {"channel": "C1", "ts": "1.0", "user": "U1", "text": "!run"}


@pytest.mark.parametrize(
    "event",
    [
        {"channel": "C2", "user": "U1", "text": "!run"},
        {"channel": "C1", "bot_id": "B1", "text": "!run"},
        {"channel": "C1", "subtype": "bot_message", "text": "!run"},
        {"channel": "C1", "subtype": "message_changed", "text": "!run"},
        {"channel": "C1", "user": "U1", "text": "just chatting"},
        {"channel": "C1", "user": "U1"},
    ],
)
def test_parse_event_filters(event):
    assert parse_event(event, "C1") is None
