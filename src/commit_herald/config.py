from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    SLACK_BOT_TOKEN: Optional[str] = Field(None, description="Slack Bot User OAuth Token")
    SLACK_APP_TOKEN: Optional[str] = Field(None, description="Slack App-Level Token (for Socket Mode)")
    SLACK_CHANNEL_ID: Optional[str] = Field(None, description="Channel ID for review and drafts")
    OPENAI_API_KEY: Optional[str] = Field(None, description="OpenAI API Key")
    MODEL: str = "gpt-4o-mini"
    LOG_LEVEL: str = "INFO"

    # HTTP API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 3001

    # GitHub
    GITHUB_TOKEN: Optional[str] = Field(None, description="Optional GitHub token (higher rate limits, private repos)")
    GITHUB_REPOS: str = Field("", description="Comma-separated owner/name list to watch")
    GITHUB_REPOS_PER_PAGE: int = 100
    GITHUB_REPOS_SORT: str = "updated"

    # X (Twitter), OAuth 1.0a user context
    X_API_KEY: Optional[str] = None
    X_API_SECRET: Optional[str] = None
    X_ACCESS_TOKEN: Optional[str] = None
    X_ACCESS_TOKEN_SECRET: Optional[str] = None
    X_CHARACTER_LIMIT: int = 280

    # Review flow
    COMMIT_LIST_COUNT: int = 5
    COMMIT_CHECK_INTERVAL_MS: int = 30000
    DEFAULT_PROJECT_NAME: str = "Project"
    MAX_SUMMARY_LENGTH: int = Field(800, description="Display-only cap for summaries in chat replies")
    MAX_MESSAGE_LENGTH: int = Field(3000, description="Chunk size for outgoing chat messages")

    # MLflow settings
    MLFLOW_TRACKING_URI: str = Field("http://127.0.0.1:5000", description="MLflow tracking server URI")
    MLFLOW_ENABLE_TRACING: bool = Field(False, description="Enable MLflow tracing")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def github_repo_list(self) -> List[str]:
        return [r.strip() for r in self.GITHUB_REPOS.split(",") if r.strip()]

@lru_cache()
def get_settings() -> Settings:
    return Settings()
