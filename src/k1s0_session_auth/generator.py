"""セッション ID 生成ユーティリティ"""

from __future__ import annotations

import base64
import os

from .exceptions import SessionAuthError, SessionAuthErrorCodes

SESSION_ID_ENTROPY_SIZE = 25


def generate_id_from_entropy_size(size: int) -> str:
    """暗号論的に安全な乱数から ID を生成する。

    base32（小文字、パディングなし）でエンコードする。

    Args:
        size: 乱数のバイト数。パディングが出ないよう 5 の倍数であること。

    Returns:
        size * 8 / 5 文字の ID

    Raises:
        SessionAuthError: size が 5 の正の倍数でない場合（INVALID_ARGUMENT）
    """
    if size <= 0 or size % 5 != 0:
        raise SessionAuthError(
            code=SessionAuthErrorCodes.INVALID_ARGUMENT,
            message=f"Argument 'size' must be a positive multiple of 5, got {size}",
        )
    return base64.b32encode(os.urandom(size)).decode("ascii").lower()


def generate_session_id() -> str:
    """40 文字のセッション ID を生成する。"""
    return generate_id_from_entropy_size(SESSION_ID_ENTROPY_SIZE)
