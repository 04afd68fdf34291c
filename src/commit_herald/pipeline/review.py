"""Post review state machine.

Per-session flow: list commits -> select some -> draft (summary + post) ->
publish or discard. Regenerating keeps the summary and drafts a new post.

Every provider call is awaited, so another handler can run in between. A
draft is always computed first and written to the store in one step at the
end; if two drafts for the same key are in flight, the last one to finish
wins.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from ..config import get_settings
from ..errors import ValidationError
from ..llm.compose import compose_post
from ..llm.summarize import summarize_changes
from ..log import get_logger
from ..rendering.analysis import build_change_analysis, project_name_from_repo
from ..retrieval.github import GitHubClient, github_client
from ..schemas.commit import Commit
from ..schemas.session import Session, SessionKey
from ..social.x_client import XPublisher, x_publisher
from ..store.sessions import SessionStore

settings = get_settings()
logger = get_logger("review")


@dataclass
class Draft:
    summary: str
    post: str
    project_name: str


async def generate_draft(commits: List[Commit]) -> Draft:
    """Analysis -> summary -> post, named after the first commit's repository."""
    summary = await summarize_changes(build_change_analysis(commits))
    project_name = project_name_from_repo(commits[0].repo, settings.DEFAULT_PROJECT_NAME)
    post = await compose_post(summary, project_name)
    return Draft(summary=summary, post=post, project_name=project_name)


def parse_selection(selection: Sequence[Union[int, str]], count: int) -> List[int]:
    """
    1-indexed user selection -> 0-based indices, duplicates dropped, order kept.
    Any entry that is not an integer in 1..count rejects the whole selection.
    """
    if not selection:
        raise ValidationError("Invalid commit numbers. Use format: `!repo 1` or `!repo 1,2`")

    indices: List[int] = []
    for raw in selection:
        if isinstance(raw, bool):
            number = None
        elif isinstance(raw, int):
            number = raw
        elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
            # ASCII only: "²" passes isdigit() but int() rejects it
            number = int(raw.strip())
        else:
            number = None

        if number is None or not 1 <= number <= count:
            raise ValidationError(
                f"Invalid commit number {raw!r}. Pick numbers between 1 and {count}, "
                "e.g. `!repo 1` or `!repo 1,2`"
            )
        if number - 1 not in indices:
            indices.append(number - 1)
    return indices


class ReviewService:
    def __init__(
        self,
        store: SessionStore,
        github: GitHubClient = github_client,
        publisher: XPublisher = x_publisher,
    ):
        self.store = store
        self.github = github
        self.publisher = publisher

    async def list_commits(self, user_id: str) -> List[Commit]:
        """
        Fetch the latest commits across the configured repositories and start a fresh session.
        Nothing is stored when no commits come back.
        """
        repos = settings.github_repo_list
        if not repos:
            raise ValidationError("GitHub repositories not configured (set GITHUB_REPOS)")

        commits = await self.github.fetch_recent(repos, settings.GITHUB_TOKEN, settings.COMMIT_LIST_COUNT)
        if not commits:
            return []

        self.store.put(SessionKey.by_user(user_id), Session(commits=commits))
        logger.info(f"Listed {len(commits)} commits for {user_id}")
        return commits

    async def select(self, user_id: str, selection: Sequence[Union[int, str]]) -> Session:
        key = SessionKey.by_user(user_id)
        session = self.store.get(key)
        if session is None or not session.commits:
            raise ValidationError("Please run `!run` first to fetch commits")

        indices = parse_selection(selection, len(session.commits))
        selected = [session.commits[i] for i in indices]

        draft = await generate_draft(selected)

        session.selected_commits = selected
        session.set_draft(draft.summary, draft.post, draft.project_name)
        self.store.put(key, session)
        logger.info(f"Drafted post for {key} from {len(selected)} commit(s)")
        return session

    async def regenerate(self, user_id: str, channel_id: Optional[str]) -> Tuple[SessionKey, Session]:
        found = self.store.resolve(user_id, channel_id, lambda s: s.generated_summary is not None)
        if found is None:
            raise ValidationError("No post to regenerate. Please run `!repo <numbers>` first to generate a post.")
        key, session = found
        if not session.generated_summary or not session.project_name:
            raise ValidationError("Cannot regenerate: missing summary or project name.")

        post = await compose_post(session.generated_summary, session.project_name)

        session.set_draft(session.generated_summary, post, session.project_name)
        self.store.put(key, session)
        logger.info(f"Regenerated post for {key}")
        return key, session

    def discard(self, user_id: str, channel_id: Optional[str]) -> SessionKey:
        found = self.store.resolve(user_id, channel_id, lambda s: s.has_draft)
        if found is None:
            raise ValidationError("No post to discard.")
        key, _ = found
        self.store.delete(key)
        logger.info(f"Discarded draft for {key}")
        return key

    async def confirm_publish(self, user_id: str, channel_id: Optional[str]) -> SessionKey:
        """
        Publish the pending draft. The session is dropped only after the provider accepted it;
        on failure it stays as is so the user can retry or discard.
        """
        found = self.store.resolve(user_id, channel_id, lambda s: s.pending_post)
        if found is None:
            raise ValidationError("No post generated. Please run `!repo <numbers>` first to generate a post.")
        key, session = found

        await self.publisher.publish(session.generated_post)

        self.store.delete(key)
        logger.info(f"Published draft for {key}")
        return key
