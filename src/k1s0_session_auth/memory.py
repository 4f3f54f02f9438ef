"""インメモリ SessionStore（テスト用）"""

from __future__ import annotations

import dataclasses
from datetime import datetime

from .models import Session, User
from .store import SessionStore


class InMemorySessionStore(SessionStore[Session, User]):
    """テスト用のインメモリセッションストア。

    取得時はセッションのコピーを返すため、有効期限の変更は
    update_session_expiration を経由したときだけ保存される。
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._sessions: dict[str, Session] = {}

    def add_user(self, user: User) -> None:
        self._users[user.id] = user

    def add_session(self, session: Session) -> None:
        self._sessions[session.id] = session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def get_session_and_user(self, session_id: str) -> tuple[Session | None, User | None]:
        session = self._sessions.get(session_id)
        if session is None:
            return None, None
        user = self._users.get(session.user_id)
        if user is None:
            return None, None
        return dataclasses.replace(session, attributes=dict(session.attributes)), user

    async def delete_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def update_session_expiration(self, session_id: str, expires_at: datetime) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.expires_at = expires_at
