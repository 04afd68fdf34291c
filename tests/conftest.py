import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from dotenv import load_dotenv

from commit_herald.config import get_settings
from commit_herald.schemas.commit import Commit, FileChange

@pytest.fixture(scope="session", autouse=True)
def _load_env():
    # Load .env once per session to avoid side-effects on import time
    load_dotenv()

@pytest.fixture
def settings():
    """
    The shared Settings singleton, restored after the test.
    Modules read `settings` at call time, so tests can tweak attributes directly.
    """
    s = get_settings()
    original = s.model_copy()
    s.GITHUB_REPOS = "acme/rocket,acme/widget"
    s.GITHUB_TOKEN = None
    s.X_CHARACTER_LIMIT = 280
    s.COMMIT_LIST_COUNT = 5
    s.DEFAULT_PROJECT_NAME = "Project"
    s.MAX_SUMMARY_LENGTH = 800
    s.MAX_MESSAGE_LENGTH = 3000
    s.MLFLOW_ENABLE_TRACING = False
    yield s
    for name in type(s).model_fields:
        setattr(s, name, getattr(original, name))

@pytest.fixture
def make_commit():
    """Factory for Commit objects; later `minutes` means newer."""
    base = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def _make(sha="abc1234", message="Add login flow", repo="acme/rocket", minutes=0, files=True):
        return Commit(
            sha=sha,
            message=message,
            authored_at=base + timedelta(minutes=minutes),
            url=f"https://github.com/{repo}/commit/{sha}",
            repo=repo,
            files=[
                FileChange(path="src/auth/login.py", status="added", additions=120, deletions=0),
                FileChange(path="README.md", status="modified", additions=4, deletions=1),
            ] if files else None,
        )

    return _make

class FakeGitHub:
    """Stands in for GitHubClient; results are plain lists set by the test."""

    def __init__(self, recent=None, latest=None):
        self.recent = recent or []
        self.latest = latest or []
        self.fetch_recent = AsyncMock(side_effect=lambda repos, token=None, count=5: list(self.recent))
        self.fetch_latest = AsyncMock(side_effect=lambda repos, token=None: list(self.latest))
        self.list_repos = AsyncMock(return_value=[])

@pytest.fixture
def fake_github():
    return FakeGitHub()

@pytest.fixture
def fake_publisher():
    publisher = AsyncMock()
    publisher.publish = AsyncMock(return_value=None)
    return publisher

@pytest.fixture
def mock_complete():
    """
    Patches the text-completion call used by the summarizer and the composer.
    Tests set `.side_effect` / `.return_value` on the yielded AsyncMock.
    """
    from commit_herald.llm.client import llm_client

    with patch.object(llm_client, "complete", new=AsyncMock()) as mock:
        yield mock

async def scripted_completion(prompt: str) -> str:
    """Short, deterministic provider answers keyed on which prompt was sent."""
    if prompt.startswith("Analyze these GitHub commits"):
        return "The team shipped a new sign-in experience. Setup docs were refreshed."
    return "A smoother sign-in experience is live for everyone."

@pytest.fixture
def scripted_llm(mock_complete):
    mock_complete.side_effect = scripted_completion
    return mock_complete
