"""Background commit watcher.

Checks the latest commit of every configured repository on a fixed schedule.
The first observation of a repository only records its head (seeding); any
later change drafts a post into the channel's auto-session and announces it.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

from ..config import get_settings
from ..log import get_logger
from ..rendering.chat_format import render_auto_draft
from ..retrieval.github import GitHubClient, github_client
from ..schemas.commit import Commit
from ..schemas.session import Session, SessionKey
from ..store.sessions import SessionStore
from .review import generate_draft

settings = get_settings()
logger = get_logger("watcher")

Notify = Callable[[str, str], Awaitable[None]]


class CommitWatcher:
    def __init__(
        self,
        store: SessionStore,
        channel_id: str,
        notify: Notify,
        github: GitHubClient = github_client,
        interval_ms: Optional[int] = None,
    ):
        self.store = store
        self.channel_id = channel_id
        self.notify = notify
        self.github = github
        if interval_ms is None:
            interval_ms = settings.COMMIT_CHECK_INTERVAL_MS
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.interval = interval_ms / 1000
        self._task: Optional[asyncio.Task] = None

    async def _latest(self) -> List[Commit]:
        return await self.github.fetch_latest(settings.github_repo_list, settings.GITHUB_TOKEN)

    async def seed(self) -> None:
        """Record the current head of every repository without drafting anything."""
        if not settings.github_repo_list:
            return
        try:
            for commit in await self._latest():
                self.store.set_watermark(commit.repo, commit.sha)
            logger.info("Initialized commit tracking")
        except Exception:
            logger.exception("Error initializing commit tracking")

    async def tick(self) -> int:
        """
        One poll cycle. Returns the number of drafts produced.
        Never raises: a failed cycle is logged and the next one runs on schedule.
        """
        if not settings.github_repo_list:
            return 0
        drafted = 0
        try:
            for commit in await self._latest():
                last_sha = self.store.watermark(commit.repo)
                if last_sha == commit.sha:
                    continue
                self.store.set_watermark(commit.repo, commit.sha)
                if last_sha is None:
                    logger.info(f"Seeded watermark for {commit.repo} at {commit.sha}")
                    continue
                logger.info(f"New commit in {commit.repo}: {last_sha} -> {commit.sha}")
                if await self.process_new_commit(commit):
                    drafted += 1
        except Exception:
            logger.exception("Error checking for new commits")
        return drafted

    async def process_new_commit(self, commit: Commit) -> bool:
        try:
            draft = await generate_draft([commit])
        except Exception as e:
            logger.exception(f"Error processing new commit {commit.repo}@{commit.sha}")
            await self.notify(self.channel_id, f"Error generating post: {e}")
            return False

        session = Session(commits=[commit], selected_commits=[commit])
        session.set_draft(draft.summary, draft.post, draft.project_name)
        self.store.put(SessionKey.by_channel(self.channel_id), session)

        await self.notify(self.channel_id, render_auto_draft(commit.repo, draft.post))
        return True

    async def run(self) -> None:
        """
        Fixed-rate loop. A tick that overruns its slot skips the missed slots.
        """
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            await self.tick()
            now = loop.time()
            next_at += self.interval
            while next_at <= now:
                next_at += self.interval

    async def start(self) -> asyncio.Task:
        """Seed watermarks and schedule the polling loop once per process."""
        if self._task is None:
            await self.seed()
            self._task = asyncio.create_task(self.run(), name="commit-watcher")
            logger.info(f"Watching {len(settings.github_repo_list)} repositories every {self.interval:g}s")
        return self._task
