"""In-memory session and watermark store.

Holds the review sessions (per user, and per channel for drafts the watcher
produced) plus the last seen commit of every watched repository. Everything
lives for the process lifetime only.

All access happens on one asyncio event loop, so there is no locking. Callers
that await between reading and writing a session accept that another handler
may have written the same key in the meantime (last write wins).
"""

from typing import Callable, Dict, Optional, Tuple

from ..schemas.session import Session, SessionKey


class SessionStore:
    def __init__(self):
        self._sessions: Dict[SessionKey, Session] = {}
        self._watermarks: Dict[str, str] = {}

    def get(self, key: SessionKey) -> Optional[Session]:
        return self._sessions.get(key)

    def put(self, key: SessionKey, session: Session) -> None:
        self._sessions[key] = session

    def delete(self, key: SessionKey) -> bool:
        return self._sessions.pop(key, None) is not None

    def __contains__(self, key: SessionKey) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def resolve(
        self,
        user_id: str,
        channel_id: Optional[str],
        accept: Callable[[Session], bool],
    ) -> Optional[Tuple[SessionKey, Session]]:
        """
        The user's own session if `accept` holds for it, else the channel's auto-session.
        Lets anyone in the channel act on a draft the watcher produced.
        """
        candidates = [SessionKey.by_user(user_id)]
        if channel_id:
            candidates.append(SessionKey.by_channel(channel_id))
        for key in candidates:
            session = self._sessions.get(key)
            if session is not None and accept(session):
                return key, session
        return None

    def watermark(self, repo: str) -> Optional[str]:
        return self._watermarks.get(repo)

    def set_watermark(self, repo: str, sha: str) -> None:
        self._watermarks[repo] = sha
