"""HTTP API for generating and publishing posts outside of Slack.

Usage:
    python -m commit_herald.main_api  (or the commit-herald-api script)
"""

from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import get_settings
from .errors import HeraldError, NotFoundError, ValidationError
from .llm.compose import compose_post
from .llm.summarize import summarize_changes
from .log import setup_logging, get_logger
from .rendering.analysis import build_change_analysis, project_name_from_repo
from .retrieval.github import GitHubClient, github_client
from .schemas.commit import Commit
from .social.x_client import XPublisher, x_publisher

settings = get_settings()
setup_logging()
logger = get_logger("api")

app = FastAPI(title="Commit Herald")


class GenerateRequest(BaseModel):
    summary: Optional[str] = None
    project_name: Optional[str] = Field(None, alias="projectName")


class PostRequest(BaseModel):
    text: Optional[str] = None


class SummarizeRequest(BaseModel):
    selected_commits: List[Commit] = Field(default_factory=list, alias="selectedCommits")


def get_github() -> GitHubClient:
    return github_client


def get_publisher() -> XPublisher:
    return x_publisher


@app.exception_handler(HeraldError)
async def herald_error_handler(request: Request, exc: HeraldError):
    if isinstance(exc, ValidationError):
        status = 400
    elif isinstance(exc, NotFoundError):
        status = 404
    else:
        status = 500
    logger.error(f"{request.url.path} failed: {exc}")
    return JSONResponse(status_code=status, content={"error": exc.message})


@app.post("/api/generate")
async def generate_post(body: GenerateRequest):
    if not body.summary:
        raise ValidationError("Summary is required")
    post = await compose_post(body.summary, body.project_name)
    return {"post": post}


@app.post("/api/post")
async def publish_post(body: PostRequest, publisher: XPublisher = Depends(get_publisher)):
    if not body.text:
        raise ValidationError("Post text is required")
    await publisher.publish(body.text)
    return {"success": True}


@app.get("/api/automation/github/commits")
async def github_commits(github: GitHubClient = Depends(get_github)):
    repos = settings.github_repo_list
    if not repos:
        raise ValidationError("GITHUB_REPOS not configured in .env")
    commits = await github.fetch_recent(repos, settings.GITHUB_TOKEN, settings.COMMIT_LIST_COUNT)
    return {"commits": [c.model_dump(mode="json") | {"date": c.date} for c in commits]}


@app.get("/api/automation/github/repos")
async def github_repos(
    username: Optional[str] = None,
    token: Optional[str] = None,
    github: GitHubClient = Depends(get_github),
):
    if not username:
        raise ValidationError("Username is required")
    repos = await github.list_repos(username, token)
    return {"repos": repos}


@app.post("/api/automation/github/summarize")
async def summarize_commits(body: SummarizeRequest):
    if not body.selected_commits:
        raise ValidationError("Selected commits are required")
    summary = await summarize_changes(build_change_analysis(body.selected_commits))
    project_name = project_name_from_repo(body.selected_commits[0].repo, settings.DEFAULT_PROJECT_NAME)
    return {"summary": summary, "projectName": project_name}


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def main():
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_config=None)

if __name__ == "__main__":
    main()
