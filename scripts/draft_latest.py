import asyncio
from dotenv import load_dotenv
from commit_herald.config import get_settings
from commit_herald.pipeline.review import generate_draft
from commit_herald.retrieval.github import github_client

async def run():
    print("Loading environment...")
    load_dotenv()
    settings = get_settings()
    repos = settings.github_repo_list

    if not repos:
        print("GITHUB_REPOS is empty. Nothing to draft.")
        return

    print(f"Fetching latest commit from {len(repos)} repositories...")
    commits = await github_client.fetch_recent(repos, settings.GITHUB_TOKEN, count=1)

    if not commits:
        print("No commits found.")
        return

    latest = commits[0]
    print(f"Latest commit {latest.sha} in {latest.repo} ({latest.date}):")
    print(f"Message: {latest.message[:100]}")
    print(f"Files: {len(latest.files or [])}")

    print("Drafting post (nothing is published)...")
    draft = await generate_draft([latest])

    print("\n--- Summary ---")
    print(draft.summary)
    print(f"\n--- Post ({len(draft.post)}/{settings.X_CHARACTER_LIMIT} chars) ---")
    print(draft.post)

if __name__ == "__main__":
    asyncio.run(run())
