"""Review session state.

A session is addressed either by the user who ran `!run` or, for drafts the
watcher produced on its own, by the channel it posted into.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .commit import Commit

USER = "user"
CHANNEL = "channel"


@dataclass(frozen=True)
class SessionKey:
    kind: str
    id: str

    @classmethod
    def by_user(cls, user_id: str) -> "SessionKey":
        return cls(USER, user_id)

    @classmethod
    def by_channel(cls, channel_id: str) -> "SessionKey":
        return cls(CHANNEL, channel_id)

    @property
    def is_auto(self) -> bool:
        return self.kind == CHANNEL

    def __str__(self) -> str:
        return f"auto-{self.id}" if self.is_auto else self.id


class Session(BaseModel):
    commits: List[Commit] = Field(default_factory=list)
    selected_commits: List[Commit] = Field(default_factory=list)
    generated_summary: Optional[str] = None
    generated_post: Optional[str] = None
    project_name: Optional[str] = None
    pending_post: bool = False

    @model_validator(mode="after")
    def validate_pending(self) -> "Session":
        if self.pending_post and self.generated_post is None:
            raise ValueError("pending_post requires a generated post")
        return self

    @property
    def has_draft(self) -> bool:
        return self.generated_post is not None

    def set_draft(self, summary: str, post: str, project_name: Optional[str]) -> None:
        """Store a freshly generated draft and mark it as awaiting a decision."""
        self.generated_summary = summary
        self.generated_post = post
        self.project_name = project_name
        self.pending_post = True
