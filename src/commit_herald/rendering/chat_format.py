"""Chat message rendering.

Builds the bot's replies in Markdown and converts them to Slack mrkdwn
(**bold** -> *bold*), leaving code blocks untouched.
"""

from __future__ import annotations

import re
from typing import List

from ..schemas.commit import Commit

# Convert Markdown **bold** -> Slack *bold*
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")

COMMIT_MESSAGE_PREVIEW = 60
CONFIRM_HINT = "Use `!post` to post this to X, or `!no` to discard."

HELP_TEXT = """**Available Commands:**

`!run` - Fetch and display the latest commits from all repositories
`!repo <numbers>` - Select commits by number and generate a post (e.g., `!repo 1` or `!repo 1,2`)
`!redo` - Regenerate the post from the current summary
`!post` - Post the generated content to X
`!no` - Discard the current post
`!help` - Show this help message

**Automatic Features:**
- The bot checks the repositories for new commits every {interval} seconds
- When a new commit is detected, a post is generated and you'll be asked to confirm with `!post` or `!no`"""


def markdown_to_slack_mrkdwn(text: str) -> str:
    """
    Convert Markdown bold (**like this**) to Slack mrkdwn bold (*like this*).
    Keeps triple-backtick code blocks unchanged.
    """
    parts = re.split(r"(```[\s\S]*?```)", text)  # keep code blocks
    out: List[str] = []
    for p in parts:
        if p.startswith("```") and p.endswith("```"):
            out.append(p)
        else:
            out.append(_BOLD_RE.sub(r"*\1*", p))
    return "".join(out)


def truncate_for_display(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def _code_block(text: str) -> str:
    return f"```\n{text}\n```"


def render_help(interval_seconds: int) -> str:
    return markdown_to_slack_mrkdwn(HELP_TEXT.format(interval=interval_seconds))


def render_commit_list(commits: List[Commit]) -> str:
    listing = "\n".join(
        f"{i + 1} - {c.repo}: {truncate_for_display(c.message, COMMIT_MESSAGE_PREVIEW)}"
        for i, c in enumerate(commits)
    )
    return (
        f"Latest commits:\n{_code_block(listing)}\n"
        "Use `!repo <numbers>` to select commits (e.g., `!repo 1` or `!repo 1,2`)"
    )


def render_post_block(post: str, title: str = "Generated Post") -> str:
    return markdown_to_slack_mrkdwn(f"**{title}:**\n{_code_block(post)}\n\n{CONFIRM_HINT}")


def render_draft(summary: str, post: str, max_summary_length: int, max_message_length: int) -> str:
    """
    Summary (display-truncated) plus post. Falls back to the post alone when the
    combined message would not fit in one chat message.
    """
    summary_text = truncate_for_display(summary, max_summary_length)
    full = markdown_to_slack_mrkdwn(f"**Summary:**\n{_code_block(summary_text)}\n\n") + render_post_block(post)
    if len(full) <= max_message_length:
        return full
    return render_post_block(post)


def render_regenerated(post: str) -> str:
    return render_post_block(post, title="Regenerated Post")


def render_auto_draft(repo: str, post: str) -> str:
    return f"New commit detected in {repo}\n\n" + render_post_block(post)


def split_message(text: str, max_length: int) -> List[str]:
    """Chunks of at most max_length characters, preferring to break at newlines."""
    chunks: List[str] = []
    while len(text) > max_length:
        cut = text.rfind("\n", 0, max_length)
        if cut <= 0:
            cut = max_length
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text:
        chunks.append(text)
    return chunks
