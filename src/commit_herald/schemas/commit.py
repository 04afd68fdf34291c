"""Pydantic schemas for commits fetched from the source host.

Defines Commit and FileChange models.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

class FileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    status: str # "added", "modified", "removed", "renamed", ...
    additions: int = 0
    deletions: int = 0

class Commit(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str # short hash
    message: str # first line only
    authored_at: datetime
    url: str
    repo: str # owner/name
    files: Optional[List[FileChange]] = None # None when the detail fetch failed

    @property
    def date(self) -> str:
        """Author date as a locale date string."""
        return self.authored_at.strftime("%x")
