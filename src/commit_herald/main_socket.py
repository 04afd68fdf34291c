"""
Socket Mode listener for Commit Herald.
Connects to Slack via WebSocket (no public URL needed), answers review
commands and runs the background commit watcher on the same event loop.

Usage:
    python -m commit_herald.main_socket
"""
import asyncio
from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from .config import get_settings
from .log import setup_logging, get_logger
from .pipeline.commands import CommandRouter
from .pipeline.review import ReviewService
from .pipeline.watcher import CommitWatcher
from .slack.client import slack_client
from .slack.parse import parse_event
from .store.sessions import SessionStore

logger = get_logger("socket_listener")
settings = get_settings()


def create_app(router: CommandRouter) -> AsyncApp:
    app = AsyncApp(token=settings.SLACK_BOT_TOKEN)

    @app.event("message")
    async def handle_message_events(event, logger):
        """
        Handle incoming message events from Slack via Socket Mode.
        Only commands in the configured channel are answered.
        """
        message = parse_event(event, settings.SLACK_CHANNEL_ID)
        if not message:
            return

        reply = await router.handle(message["user"], message["channel"], message["text"])
        if reply:
            await slack_client.send_message(message["channel"], reply)

    return app


async def run():
    if not settings.SLACK_BOT_TOKEN or not settings.SLACK_APP_TOKEN:
        logger.warning("Slack tokens not configured. Skipping bot startup.")
        return
    if not settings.SLACK_CHANNEL_ID:
        logger.warning("Slack channel ID not configured. Skipping bot startup.")
        return

    store = SessionStore()
    review = ReviewService(store)
    app = create_app(CommandRouter(review))

    watcher = CommitWatcher(store, settings.SLACK_CHANNEL_ID, notify=slack_client.send_message)
    await watcher.start()

    logger.info(f"Listening for commands in channel {settings.SLACK_CHANNEL_ID}")
    handler = AsyncSocketModeHandler(app, settings.SLACK_APP_TOKEN)
    await handler.start_async()


def main():
    setup_logging()
    asyncio.run(run())

if __name__ == "__main__":
    main()
