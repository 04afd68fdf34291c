"""Plain-text change analysis handed to the summarizer."""

from typing import List, Optional

from ..schemas.commit import Commit


def render_commit_analysis(commit: Commit) -> str:
    lines = [f"Repository: {commit.repo}", f"Commit: {commit.message}"]
    if commit.files:
        lines.append("Files changed:")
        lines.extend(
            f"- {f.path} ({f.status}): +{f.additions} -{f.deletions} lines"
            for f in commit.files
        )
    return "\n".join(lines) + "\n"


def build_change_analysis(commits: List[Commit]) -> str:
    """Repository, message and file stats of each commit, separated by `---`."""
    return "\n---\n\n".join(render_commit_analysis(c) for c in commits)


def project_name_from_repo(repo: Optional[str], default: str) -> str:
    """
    "owner/my-App" -> "My-app". Falls back to `default` when the repo has no name part.
    """
    name = repo.split("/")[1] if repo and "/" in repo else ""
    name = name or default
    return name[:1].upper() + name[1:].lower()
