import asyncio
import pytest
from unittest.mock import AsyncMock

from commit_herald.pipeline.watcher import CommitWatcher
from commit_herald.schemas.session import SessionKey
from commit_herald.store.sessions import SessionStore

CHANNEL = "C1"

@pytest.fixture
def store():
    return SessionStore()

@pytest.fixture
def notify():
    return AsyncMock()

@pytest.fixture
def watcher(store, notify, fake_github, settings):
    return CommitWatcher(store, CHANNEL, notify, github=fake_github, interval_ms=1000)

async def test_first_tick_seeds_then_change_drafts_once(watcher, store, notify, fake_github, scripted_llm, make_commit):
    """
    WHY: Starting the bot must not announce history; only commits made after start count.
    HOW: Tick with head A (never seen), then tick with head B.
    EXPECTED:
        1. First tick: watermark = A, no draft, no notification, no provider call.
        2. Second tick: exactly one draft in the channel session and one notification naming the repo.
    """
    fake_github.latest = [make_commit(sha="aaa0001", repo="acme/rocket")]
    assert await watcher.tick() == 0
    assert store.watermark("acme/rocket") == "aaa0001"
    notify.assert_not_awaited()
    scripted_llm.assert_not_awaited()

    fake_github.latest = [make_commit(sha="bbb0002", repo="acme/rocket")]
    assert await watcher.tick() == 1

    assert store.watermark("acme/rocket") == "bbb0002"
    session = store.get(SessionKey.by_channel(CHANNEL))
    assert session.pending_post is True
    assert session.generated_post.startswith("Rocket Updates\n\n")
    assert [c.sha for c in session.selected_commits] == ["bbb0002"]
    notify.assert_awaited_once()
    channel, text = notify.await_args.args
    assert channel == CHANNEL
    assert text.startswith("New commit detected in acme/rocket")
    assert "`!post`" in text

async def test_unchanged_head_is_ignored(watcher, store, notify, fake_github, scripted_llm, make_commit):
    fake_github.latest = [make_commit(sha="aaa0001")]
    await watcher.tick()
    assert await watcher.tick() == 0
    assert store.get(SessionKey.by_channel(CHANNEL)) is None
    notify.assert_not_awaited()

async def test_seed_then_change_drafts_on_first_tick(watcher, store, fake_github, scripted_llm, make_commit):
    fake_github.latest = [make_commit(sha="aaa0001")]
    await watcher.seed()
    assert store.watermark("acme/rocket") == "aaa0001"

    fake_github.latest = [make_commit(sha="bbb0002")]
    assert await watcher.tick() == 1

async def test_fetch_failure_is_swallowed(watcher, notify, fake_github):
    fake_github.fetch_latest.side_effect = RuntimeError("network down")
    assert await watcher.tick() == 0
    notify.assert_not_awaited()

async def test_seed_failure_is_swallowed(watcher, store, fake_github):
    fake_github.fetch_latest.side_effect = RuntimeError("network down")
    await watcher.seed()
    assert store.watermark("acme/rocket") is None

async def test_draft_failure_notifies_error(watcher, store, notify, fake_github, mock_complete, make_commit):
    """
    WHY: A failed auto-draft should be visible in the channel, but must not stop the watcher.
    HOW: Seed, change head, make the provider fail.
    EXPECTED: No session, one "Error generating post" notification, watermark advanced.
    """
    fake_github.latest = [make_commit(sha="aaa0001")]
    await watcher.tick()
    mock_complete.side_effect = RuntimeError("provider down")
    fake_github.latest = [make_commit(sha="bbb0002")]

    assert await watcher.tick() == 0

    assert store.get(SessionKey.by_channel(CHANNEL)) is None
    notify.assert_awaited_once_with(CHANNEL, "Error generating post: provider down")
    assert store.watermark("acme/rocket") == "bbb0002"

async def test_two_repos_changing_in_one_tick_keeps_last_draft(watcher, store, notify, fake_github, scripted_llm, make_commit):
    fake_github.latest = [
        make_commit(sha="aaa0001", repo="acme/rocket"),
        make_commit(sha="bbb0001", repo="acme/widget"),
    ]
    await watcher.tick()
    fake_github.latest = [
        make_commit(sha="aaa0002", repo="acme/rocket"),
        make_commit(sha="bbb0002", repo="acme/widget"),
    ]

    assert await watcher.tick() == 2

    session = store.get(SessionKey.by_channel(CHANNEL))
    assert session.project_name == "Widget"
    assert notify.await_count == 2

async def test_no_repositories_means_no_fetch(watcher, settings, fake_github):
    settings.GITHUB_REPOS = ""
    assert await watcher.tick() == 0
    await watcher.seed()
    fake_github.fetch_latest.assert_not_awaited()

async def test_auto_draft_can_be_published_by_any_user(watcher, store, fake_github, fake_publisher, scripted_llm, make_commit):
    from commit_herald.pipeline.review import ReviewService

    fake_github.latest = [make_commit(sha="aaa0001")]
    await watcher.tick()
    fake_github.latest = [make_commit(sha="bbb0002")]
    await watcher.tick()
    post = store.get(SessionKey.by_channel(CHANNEL)).generated_post

    review = ReviewService(store, github=fake_github, publisher=fake_publisher)
    await review.confirm_publish("U-anyone", CHANNEL)

    fake_publisher.publish.assert_awaited_once_with(post)
    assert store.get(SessionKey.by_channel(CHANNEL)) is None

def test_interval_must_be_positive(store, notify, fake_github, settings):
    with pytest.raises(ValueError):
        CommitWatcher(store, CHANNEL, notify, github=fake_github, interval_ms=0)

async def test_start_is_idempotent(watcher):
    watcher.seed = AsyncMock()
    watcher.tick = AsyncMock(return_value=0)

    first = await watcher.start()
    second = await watcher.start()

    assert first is second
    watcher.seed.assert_awaited_once()
    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first

async def test_start_seeds_before_first_tick(store, notify, fake_github, scripted_llm, settings, make_commit):
    """
    WHY: The head that exists at startup is history, not news.
    HOW: Start a fast watcher on an unchanged head and let several ticks run.
    EXPECTED: Watermark recorded, no draft, no notification, no provider call.
    """
    fake_github.latest = [make_commit(sha="aaa0001")]
    watcher = CommitWatcher(store, CHANNEL, notify, github=fake_github, interval_ms=10)

    task = await watcher.start()
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.watermark("acme/rocket") == "aaa0001"
    assert fake_github.fetch_latest.await_count >= 2
    assert store.get(SessionKey.by_channel(CHANNEL)) is None
    notify.assert_not_awaited()
    scripted_llm.assert_not_awaited()

async def test_slow_tick_skips_missed_slots(store, notify, fake_github, settings):
    """
    WHY: A tick that overruns must not be followed by a burst of catch-up ticks.
    HOW: 100ms interval, each tick takes 250ms; record when ticks start and end.
    EXPECTED: After a slow tick the next one waits for the next free slot instead of starting right away.
    """
    watcher = CommitWatcher(store, CHANNEL, notify, github=fake_github, interval_ms=100)
    loop = asyncio.get_running_loop()
    starts, ends = [], []

    async def slow_tick():
        starts.append(loop.time())
        await asyncio.sleep(0.25)
        ends.append(loop.time())
        return 0

    watcher.tick = AsyncMock(side_effect=slow_tick)

    task = asyncio.create_task(watcher.run())
    await asyncio.sleep(0.8)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(starts) >= 2
    gaps = [next_start - end for end, next_start in zip(ends, starts[1:])]
    assert gaps
    assert all(gap >= 0.025 for gap in gaps)
