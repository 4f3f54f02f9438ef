"""リクエスト Origin の検証"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import SplitResult, urlsplit

import structlog

logger = structlog.get_logger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def _parse_host(origin: str) -> str | None:
    """URL をパースして host（ホスト名と既定以外のポート）を返す。失敗時は None。"""
    try:
        parsed: SplitResult = urlsplit(origin.strip())
        port = parsed.port
    except ValueError:
        return None
    hostname = parsed.hostname
    if not parsed.scheme or not hostname:
        return None
    if ":" in hostname:
        hostname = f"[{hostname}]"
    scheme = parsed.scheme.lower()
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return hostname
    return f"{hostname}:{port}"


def verify_request_origin(origin: str, allowed_hosts: Iterable[str]) -> bool:
    """Origin ヘッダーの host が許可リストのいずれかと完全一致するか確認する。

    許可リストが空の場合は常に False を返す。ワイルドカードやサフィックス一致は行わない。

    Args:
        origin: リクエストの Origin ヘッダー値（例: "https://example.com:8443"）
        allowed_hosts: 許可する host（例: ["example.com", "localhost:3000"]）

    Returns:
        同一オリジンとして信頼できる場合 True
    """
    hosts = list(allowed_hosts)
    if not hosts:
        logger.debug("origin_rejected", reason="no_allowed_hosts")
        return False
    host = _parse_host(origin)
    if host is None:
        logger.debug("origin_rejected", reason="invalid_url", origin=origin)
        return False
    if host in hosts:
        return True
    logger.debug("origin_rejected", reason="host_mismatch", host=host)
    return False
