"""セッション・ユーザーのデータモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Generic, Protocol, TypeVar


class SessionRecord(Protocol):
    """エンジンが参照するセッションレコードの最小プロトコル。

    expires_at がタイムゾーン無しの場合は UTC として扱う。
    """

    id: str
    expires_at: datetime


SessionT = TypeVar("SessionT", bound=SessionRecord)
UserT = TypeVar("UserT")


class SessionState(StrEnum):
    """検証時にセッション ID が取りうる状態。"""

    FRESH = "FRESH"
    ROTATION_DUE = "ROTATION_DUE"
    EXPIRED = "EXPIRED"
    UNKNOWN = "UNKNOWN"


@dataclass
class Session:
    """セッションデータ。"""

    id: str
    user_id: str
    expires_at: datetime
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.expires_at.tzinfo is None:
            raise ValueError("expires_at must be timezone-aware")


@dataclass
class User:
    """ユーザーデータ。属性の形はアプリケーション側で決める。"""

    id: str
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionAndUser(Generic[SessionT, UserT]):
    """セッションとユーザーの組。

    両方とも存在するか、両方とも None のどちらか。
    """

    session: SessionT | None = None
    user: UserT | None = None

    def __post_init__(self) -> None:
        if (self.session is None) != (self.user is None):
            raise ValueError("session and user must be both present or both absent")

    @classmethod
    def empty(cls) -> SessionAndUser[SessionT, UserT]:
        """有効なセッションが無いことを表す値を返す。"""
        return cls(session=None, user=None)

    def __bool__(self) -> bool:
        return self.session is not None
