"""Chat command dispatch.

Maps `!help`, `!run`, `!repo`, `!redo`, `!post` and `!no` onto the review
state machine and renders the reply text. Transport agnostic: the Slack
listener only passes text in and sends the reply back.
"""

from typing import Optional

from ..config import get_settings
from ..errors import HeraldError
from ..log import get_logger
from ..rendering.chat_format import (
    render_commit_list,
    render_draft,
    render_help,
    render_regenerated,
)
from .review import ReviewService

settings = get_settings()
logger = get_logger("commands")


class CommandRouter:
    def __init__(self, review: ReviewService):
        self.review = review

    async def handle(self, user_id: str, channel_id: str, text: str) -> Optional[str]:
        """
        Returns the reply for a command, or None when the text is not a command.
        Domain errors become an "Error: ..." reply; the session is left as it was.
        """
        content = (text or "").strip()
        command, _, args = content.partition(" ")

        handlers = {
            "!help": self._help,
            "!run": self._run,
            "!repo": self._repo,
            "!redo": self._redo,
            "!post": self._post,
            "!no": self._no,
        }
        handler = handlers.get(command)
        if handler is None:
            return None

        try:
            return await handler(user_id, channel_id, args.strip())
        except HeraldError as e:
            logger.warning(f"{command} failed for {user_id}: {e}")
            return f"Error: {e}"

    async def _help(self, user_id, channel_id, args):
        return render_help(settings.COMMIT_CHECK_INTERVAL_MS // 1000)

    async def _run(self, user_id, channel_id, args):
        commits = await self.review.list_commits(user_id)
        if not commits:
            return "No commits found"
        return render_commit_list(commits)

    async def _repo(self, user_id, channel_id, args):
        selection = [part for part in args.split(",") if part.strip()]
        session = await self.review.select(user_id, selection)
        return render_draft(
            session.generated_summary,
            session.generated_post,
            settings.MAX_SUMMARY_LENGTH,
            settings.MAX_MESSAGE_LENGTH,
        )

    async def _redo(self, user_id, channel_id, args):
        _, session = await self.review.regenerate(user_id, channel_id)
        return render_regenerated(session.generated_post)

    async def _post(self, user_id, channel_id, args):
        await self.review.confirm_publish(user_id, channel_id)
        return "Successfully posted to X!"

    async def _no(self, user_id, channel_id, args):
        self.review.discard(user_id, channel_id)
        return "Post discarded."
