"""Cookie ヘッダーのパースと Set-Cookie 値のシリアライズ（RFC 6265 の簡易モデル）"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Literal, TypedDict, cast
from urllib.parse import quote, unquote

from .exceptions import SessionAuthError, SessionAuthErrorCodes

# encodeURIComponent と同じく英数字と - _ . ! ~ * ' ( ) 以外をエスケープする
_SAFE_CHARS = "!~*'()"
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_Priority = Literal["low", "medium", "high"]
_SameSite = Literal["lax", "strict", "none"]

_PRIORITIES = ("low", "medium", "high")
_SAME_SITE_VALUES = ("lax", "strict", "none")


class CookieOptions(TypedDict, total=False):
    """フレームワークの set_cookie() に渡すキーワード引数の形。"""

    domain: str
    expires: datetime
    max_age: int
    path: str
    priority: _Priority
    samesite: _SameSite
    httponly: bool
    partitioned: bool
    secure: bool


def encode_cookie_value(value: str) -> str:
    """Cookie 値をパーセントエンコードする。"""
    return quote(value, safe=_SAFE_CHARS)


def decode_cookie_value(value: str) -> str:
    """パーセントエンコードされた Cookie 値をデコードする。

    Raises:
        SessionAuthError: 不正なエスケープシーケンスを含む場合（DECODE_ERROR）
    """
    if _MALFORMED_ESCAPE.search(value):
        raise SessionAuthError(
            code=SessionAuthErrorCodes.DECODE_ERROR,
            message=f"Malformed escape sequence in cookie value: {value!r}",
        )
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as e:
        raise SessionAuthError(
            code=SessionAuthErrorCodes.DECODE_ERROR,
            message=f"Cookie value is not valid UTF-8: {value!r}",
            cause=e,
        ) from e


def parse_cookie_header(header: str) -> Cookies:
    """Cookie リクエストヘッダーをパースする。

    ``=`` を含まないセグメントは読み飛ばす。同名の Cookie は後勝ち。
    """
    cookies = Cookies()
    for part in header.split(";"):
        part = part.strip()
        # 値には "=" が含まれうるので最初の "=" だけで分割する
        name, sep, value = part.partition("=")
        if not sep:
            continue
        cookies.set(name, value)
    return cookies


class Cookies:
    """パース済みのリクエスト Cookie。"""

    def __init__(self) -> None:
        self._cookies: dict[str, str] = {}

    def set(self, name: str, value: str) -> None:
        self._cookies[name] = value

    def get(self, name: str) -> str | None:
        """デコード済みの値を返す。存在しなければ None。"""
        encoded = self._cookies.get(name)
        if encoded is None:
            return None
        return decode_cookie_value(encoded)

    def get_raw(self, name: str) -> str | None:
        """デコードせずに値を返す。"""
        return self._cookies.get(name)

    def has(self, name: str) -> bool:
        return name in self._cookies

    def __contains__(self, name: object) -> bool:
        return name in self._cookies

    def __iter__(self) -> Iterator[str]:
        return iter(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)


class Cookie:
    """レスポンスに付与する単一の Cookie。

    属性名とフラグ名は小文字で保持し、最初に設定された順にシリアライズする。
    """

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value
        self._attributes: dict[str, str] = {}
        # 挿入順を保つため dict をセットとして使う
        self._flags: dict[str, None] = {}

    def set_attribute(self, name: str, value: str) -> None:
        self._attributes[name.lower()] = value

    def delete_attribute(self, name: str) -> None:
        self._attributes.pop(name.lower(), None)

    def has_attribute(self, name: str) -> bool:
        return name.lower() in self._attributes

    def get_attribute(self, name: str) -> str | None:
        return self._attributes.get(name.lower())

    def set_flag(self, name: str) -> None:
        self._flags.setdefault(name.lower(), None)

    def delete_flag(self, name: str) -> None:
        self._flags.pop(name.lower(), None)

    def has_flag(self, name: str) -> bool:
        return name.lower() in self._flags

    def serialize(self) -> str:
        """Set-Cookie ヘッダー値を返す。値はパーセントエンコードする。"""
        return self._serialize(encode_cookie_value(self.value))

    def serialize_no_encoding(self) -> str:
        """値をエンコードせずに Set-Cookie ヘッダー値を返す。"""
        return self._serialize(self.value)

    def _serialize(self, value: str) -> str:
        parts = [f"{self.name}={value}"]
        parts.extend(f"{name}={attr}" for name, attr in self._attributes.items())
        parts.extend(self._flags)
        return "; ".join(parts)

    def to_cookie_options(self) -> CookieOptions:
        """属性とフラグを set_cookie() 用のキーワード引数に変換する。

        Raises:
            SessionAuthError: Priority / SameSite / Expires / Max-Age の値が
                不正な場合（INVALID_ARGUMENT）
        """
        options: CookieOptions = {}
        domain = self._attributes.get("domain")
        if domain is not None:
            options["domain"] = domain
        expires = self._attributes.get("expires")
        if expires is not None:
            try:
                options["expires"] = parsedate_to_datetime(expires)
            except (TypeError, ValueError) as e:
                raise SessionAuthError(
                    code=SessionAuthErrorCodes.INVALID_ARGUMENT,
                    message=f"Invalid 'Expires' value: '{expires}'",
                    cause=e,
                ) from e
        max_age = self._attributes.get("max-age")
        if max_age is not None:
            try:
                options["max_age"] = int(max_age)
            except ValueError as e:
                raise SessionAuthError(
                    code=SessionAuthErrorCodes.INVALID_ARGUMENT,
                    message=f"Invalid 'Max-Age' value: '{max_age}'",
                    cause=e,
                ) from e
        priority = self._attributes.get("priority")
        if priority is not None:
            priority = priority.lower()
            if priority in _PRIORITIES:
                options["priority"] = cast(_Priority, priority)
            else:
                raise SessionAuthError(
                    code=SessionAuthErrorCodes.INVALID_ARGUMENT,
                    message=f"Invalid 'Priority' value: '{priority}'",
                )
        path = self._attributes.get("path")
        if path is not None:
            options["path"] = path
        same_site = self._attributes.get("samesite")
        if same_site is not None:
            same_site = same_site.lower()
            if same_site in _SAME_SITE_VALUES:
                options["samesite"] = cast(_SameSite, same_site)
            else:
                raise SessionAuthError(
                    code=SessionAuthErrorCodes.INVALID_ARGUMENT,
                    message=f"Invalid 'SameSite' value: '{same_site}'",
                )
        if "httponly" in self._flags or "http-only" in self._flags:
            options["httponly"] = True
        if "partitioned" in self._flags:
            options["partitioned"] = True
        if "secure" in self._flags:
            options["secure"] = True
        return options

    def __repr__(self) -> str:
        return f"Cookie({self.serialize_no_encoding()!r})"
