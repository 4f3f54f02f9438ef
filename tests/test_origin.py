"""verify_request_origin のユニットテスト"""

import pytest
from k1s0_session_auth.origin import verify_request_origin


def test_empty_allowed_hosts_fails_closed() -> None:
    """許可リストが空の場合は常に False を返すこと。"""
    assert verify_request_origin("https://a.com", []) is False


def test_invalid_url_returns_false() -> None:
    """URL としてパースできない場合は False を返すこと。"""
    assert verify_request_origin("not a url", ["a.com"]) is False


def test_port_mismatch_returns_false() -> None:
    """ポートが異なる場合は False を返すこと。"""
    assert verify_request_origin("https://a.com:8080", ["a.com"]) is False


def test_matching_host_returns_true() -> None:
    """host が一致する場合は True を返すこと。"""
    assert verify_request_origin("https://a.com", ["a.com"]) is True


def test_matching_host_with_port() -> None:
    """ポート付きの host が一致する場合は True を返すこと。"""
    assert verify_request_origin("http://localhost:3000", ["example.com", "localhost:3000"]) is True


def test_default_port_is_dropped() -> None:
    """スキームの既定ポートは host に含まれないこと。"""
    assert verify_request_origin("https://a.com:443", ["a.com"]) is True
    assert verify_request_origin("http://a.com:80", ["a.com"]) is True
    assert verify_request_origin("http://a.com:443", ["a.com"]) is False


def test_subdomain_does_not_match() -> None:
    """サブドメインやサフィックスでは一致しないこと。"""
    assert verify_request_origin("https://evil.a.com", ["a.com"]) is False
    assert verify_request_origin("https://a.com", [".a.com", "*.a.com"]) is False


def test_ipv6_host() -> None:
    """IPv6 アドレスは角括弧付きの host として比較されること。"""
    assert verify_request_origin("http://[::1]:8080", ["[::1]:8080"]) is True


@pytest.mark.parametrize(
    "origin",
    ["", "null", "a.com", "//a.com", "https://a.com:99999", "https://"],
)
def test_malformed_origins_return_false(origin: str) -> None:
    """不正な Origin は False を返すこと。"""
    assert verify_request_origin(origin, ["a.com"]) is False


def test_accepts_any_iterable() -> None:
    """許可リストにタプルやジェネレーターを渡せること。"""
    assert verify_request_origin("https://a.com", ("a.com",)) is True
    assert verify_request_origin("https://a.com", (h for h in ["b.com", "a.com"])) is True
