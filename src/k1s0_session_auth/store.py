"""SessionStore 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic

from .models import SessionT, UserT


class SessionStore(ABC, Generic[SessionT, UserT]):
    """セッション・ユーザーの永続化アダプター抽象基底クラス。

    I/O 失敗時は例外を送出すること。見つからない場合は例外ではなく (None, None) を返す。
    同一セッション ID への同時ローテーションを直列化したい場合はストア側で排他を行う。
    """

    @abstractmethod
    async def get_session_and_user(
        self, session_id: str
    ) -> tuple[SessionT | None, UserT | None]:
        """セッションと紐づくユーザーを取得する。"""
        ...

    @abstractmethod
    async def delete_session(self, session_id: str) -> None:
        """セッションを削除する。存在しなくてもエラーにしない。"""
        ...

    @abstractmethod
    async def update_session_expiration(self, session_id: str, expires_at: datetime) -> None:
        """セッションの有効期限を更新する。存在しなければ何もしない。"""
        ...
