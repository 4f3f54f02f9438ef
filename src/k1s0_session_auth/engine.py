"""セッション検証・ローテーションエンジン"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any, Generic, TypeVar

import structlog

from .config import SessionAuthConfig
from .cookie import Cookie, parse_cookie_header
from .exceptions import SessionAuthError, SessionAuthErrorCodes
from .models import SessionAndUser, SessionRecord, SessionState, SessionT, UserT
from .store import SessionStore

logger = structlog.get_logger(__name__)

_T = TypeVar("_T")

# 有効期限の指定が無いセッション Cookie に与える期限
FALLBACK_COOKIE_LIFETIME = timedelta(days=365)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _mask(session_id: str) -> str:
    return session_id[:8] + "..."


def _as_utc(value: datetime) -> datetime:
    """タイムゾーン無しの datetime は UTC とみなす。"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def classify_session(
    session: SessionRecord | None,
    user: Any | None,
    now: datetime,
    lifetime_seconds: int,
) -> SessionState:
    """取得したセッションの状態を判定する。

    有効期間の後半に入ったセッションはローテーション対象とする。
    タイムゾーン無しの expires_at は UTC として比較する。
    """
    if session is None or user is None:
        return SessionState.UNKNOWN
    now = _as_utc(now)
    expires_at = _as_utc(session.expires_at)
    if now >= expires_at:
        return SessionState.EXPIRED
    if now >= expires_at - timedelta(seconds=lifetime_seconds / 2):
        return SessionState.ROTATION_DUE
    return SessionState.FRESH


class SessionEngine(Generic[SessionT, UserT]):
    """セッション ID の検証、期限延長、Cookie 生成を行うエンジン。

    ストアへの読み込みと書き込みはトランザクションで囲まない。
    同一セッションへの同時リクエストで二重にローテーションさせたくない場合は
    ストア側で排他制御を行うこと。
    """

    def __init__(
        self,
        store: SessionStore[SessionT, UserT],
        config: SessionAuthConfig | None = None,
    ) -> None:
        self._store = store
        self._config = config or SessionAuthConfig()

    @property
    def config(self) -> SessionAuthConfig:
        return self._config

    async def _call_store(
        self, operation: str, session_id: str, call: Callable[[], Awaitable[_T]]
    ) -> _T:
        """ストア呼び出しを実行し、失敗を STORAGE_FAILURE に変換する。

        呼び出し元タスク自身のキャンセルはそのまま再送出する。
        ストア内部で発生したキャンセルは STORAGE_FAILURE として扱う。
        """
        try:
            timeout = self._config.storage_timeout_seconds
            if timeout is not None:
                return await asyncio.wait_for(call(), timeout)
            return await call()
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            raise self._storage_failure(operation, session_id, e) from e
        except Exception as e:
            raise self._storage_failure(operation, session_id, e) from e

    def _storage_failure(
        self, operation: str, session_id: str, cause: BaseException
    ) -> SessionAuthError:
        logger.error(
            "storage_failure",
            operation=operation,
            session=_mask(session_id),
            error=repr(cause),
        )
        return SessionAuthError(
            code=SessionAuthErrorCodes.STORAGE_FAILURE,
            message=f"Failed to {operation}",
            cause=cause,
        )

    async def validate_session(self, session_id: str) -> SessionAndUser[SessionT, UserT]:
        """セッション ID を検証する。

        期限切れのセッションは削除し、有効期間の後半に入ったセッションは期限を延長する。

        Args:
            session_id: Cookie などから取り出したセッション ID

        Returns:
            有効な場合はセッションとユーザーの組、それ以外は空の組

        Raises:
            SessionAuthError: ストアの呼び出しに失敗した場合（STORAGE_FAILURE）
        """
        session, user = await self._call_store(
            "get session and user",
            session_id,
            lambda: self._store.get_session_and_user(session_id),
        )
        if session is None or user is None:
            logger.debug("session_not_found", session=_mask(session_id))
            return SessionAndUser.empty()

        now = _now()
        state = classify_session(session, user, now, self._config.session_expires_in_seconds)
        if state == SessionState.EXPIRED:
            logger.info("session_expired", session=_mask(session_id))
            await self._call_store(
                "delete session", session_id, lambda: self._store.delete_session(session_id)
            )
            return SessionAndUser.empty()

        if state == SessionState.ROTATION_DUE:
            new_expires_at = now + timedelta(seconds=self._config.session_expires_in_seconds)
            # ストアが naive な UTC を返す場合は同じ形で書き戻す
            if session.expires_at.tzinfo is None:
                new_expires_at = new_expires_at.astimezone(timezone.utc).replace(tzinfo=None)
            # 永続化の成否にかかわらず、返すセッションは新しい期限を持つ
            session.expires_at = new_expires_at
            await self._call_store(
                "update session expiration",
                session_id,
                lambda: self._store.update_session_expiration(session.id, new_expires_at),
            )
            logger.info(
                "session_rotated",
                session=_mask(session_id),
                expires_at=session.expires_at.isoformat(),
            )

        return SessionAndUser(session=session, user=user)

    async def invalidate_session(self, session_id: str) -> None:
        """セッションの状態にかかわらず削除する。"""
        await self._call_store(
            "delete session", session_id, lambda: self._store.delete_session(session_id)
        )
        logger.info("session_invalidated", session=_mask(session_id))

    def get_new_session_expiration(self) -> datetime:
        """新規セッションに与える有効期限を返す。"""
        return _now() + timedelta(seconds=self._config.session_expires_in_seconds)

    def parse_session_cookie(self, cookie_header: str) -> str | None:
        """Cookie ヘッダーからセッション ID を取り出す。"""
        return parse_cookie_header(cookie_header).get(self._config.session_cookie_name)

    def create_session_cookie(self, session_id: str, expires_at: datetime | None = None) -> Cookie:
        """セッション ID を載せた Cookie を作成する。

        expires_at が None の場合は 365 日後を Expires とする。
        """
        if expires_at is None:
            expires_at = _now() + FALLBACK_COOKIE_LIFETIME
        cookie = Cookie(self._config.session_cookie_name, session_id)
        cookie.set_attribute("Expires", _http_date(expires_at))
        self._apply_common_attributes(cookie)
        return cookie

    def create_blank_session_cookie(self) -> Cookie:
        """クライアント側のセッション Cookie を即時に削除させる空の Cookie を作成する。"""
        cookie = Cookie(self._config.session_cookie_name, "")
        cookie.set_attribute("Max-Age", "0")
        self._apply_common_attributes(cookie)
        return cookie

    def _apply_common_attributes(self, cookie: Cookie) -> None:
        cookie.set_attribute("SameSite", "Lax")
        cookie.set_attribute("Path", "/")
        cookie.set_flag("HttpOnly")
        if self._config.secure_cookies:
            cookie.set_flag("Secure")


def _http_date(value: datetime) -> str:
    """datetime を HTTP-date（例: Wed, 21 Oct 2026 07:28:00 GMT）に整形する。"""
    return format_datetime(_as_utc(value).astimezone(timezone.utc), usegmt=True)
