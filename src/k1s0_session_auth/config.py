"""セッションエンジン設定（pydantic BaseModel）と YAML ローダー"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import SessionAuthError, SessionAuthErrorCodes

DEFAULT_SESSION_EXPIRES_IN_SECONDS = 60 * 60 * 24 * 30  # 30 日
DEFAULT_SESSION_COOKIE_NAME = "auth_session"

_SECTION_KEY = "session_auth"


class SessionAuthConfig(BaseModel):
    """セッションエンジン設定。構築後は変更不可。"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    session_expires_in_seconds: int = Field(default=DEFAULT_SESSION_EXPIRES_IN_SECONDS, gt=0)
    session_cookie_name: str = Field(default=DEFAULT_SESSION_COOKIE_NAME, min_length=1)
    secure_cookies: bool = True
    storage_timeout_seconds: float | None = Field(default=None, gt=0)


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SessionAuthError(
            code=SessionAuthErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise SessionAuthError(
            code=SessionAuthErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise SessionAuthError(
            code=SessionAuthErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def load_config(path: Path) -> SessionAuthConfig:
    """設定ファイルを読み込んで SessionAuthConfig を返す。

    トップレベルに ``session_auth`` セクションがあればそれを、無ければ文書全体を使う。
    """
    data = _read_yaml(path)
    section = data.get(_SECTION_KEY, data)
    try:
        return SessionAuthConfig.model_validate(section)
    except ValidationError as e:
        raise SessionAuthError(
            code=SessionAuthErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
