"""SessionAuthConfig と設定ローダーのユニットテスト"""

from pathlib import Path

import pytest
from pydantic import ValidationError
from k1s0_session_auth.config import SessionAuthConfig, load_config
from k1s0_session_auth.exceptions import SessionAuthError, SessionAuthErrorCodes


def test_default_config() -> None:
    """既定値が設定されること。"""
    config = SessionAuthConfig()
    assert config.session_expires_in_seconds == 60 * 60 * 24 * 30
    assert config.session_cookie_name == "auth_session"
    assert config.secure_cookies is True
    assert config.storage_timeout_seconds is None


def test_config_is_frozen() -> None:
    """構築後に値を変更できないこと。"""
    config = SessionAuthConfig()
    with pytest.raises(ValidationError):
        config.session_cookie_name = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"session_expires_in_seconds": 0},
        {"session_expires_in_seconds": -1},
        {"session_cookie_name": ""},
        {"storage_timeout_seconds": 0},
        {"unknown": 1},
    ],
)
def test_config_validation(kwargs: dict) -> None:
    """不正な値は ValidationError になること。"""
    with pytest.raises(ValidationError):
        SessionAuthConfig(**kwargs)


def test_load_section(tmp_path: Path) -> None:
    """session_auth セクションから設定が読み込まれること。"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "app:\n  name: web\n"
        "session_auth:\n"
        "  session_expires_in_seconds: 3600\n"
        "  session_cookie_name: sid\n"
        "  secure_cookies: false\n"
    )
    config = load_config(config_file)
    assert config.session_expires_in_seconds == 3600
    assert config.session_cookie_name == "sid"
    assert config.secure_cookies is False


def test_load_whole_document(tmp_path: Path) -> None:
    """セクションが無い場合は文書全体が設定として読み込まれること。"""
    config_file = tmp_path / "session.yaml"
    config_file.write_text("storage_timeout_seconds: 2.5\n")
    config = load_config(config_file)
    assert config.storage_timeout_seconds == 2.5
    assert config.session_cookie_name == "auth_session"


def test_load_empty_file(tmp_path: Path) -> None:
    """空ファイルの場合は既定値になること。"""
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    assert load_config(config_file) == SessionAuthConfig()


def test_load_file_not_found(tmp_path: Path) -> None:
    """存在しないファイルで READ_FILE_ERROR が発生すること。"""
    with pytest.raises(SessionAuthError) as exc_info:
        load_config(tmp_path / "missing.yaml")
    assert exc_info.value.code == SessionAuthErrorCodes.READ_FILE


def test_load_invalid_yaml(tmp_path: Path) -> None:
    """不正 YAML で PARSE_YAML_ERROR が発生すること。"""
    bad_file = tmp_path / "bad.yaml"
    bad_file.write_text("session_auth: {invalid: yaml: content:\n")
    with pytest.raises(SessionAuthError) as exc_info:
        load_config(bad_file)
    assert exc_info.value.code == SessionAuthErrorCodes.PARSE_YAML


def test_load_non_mapping_root(tmp_path: Path) -> None:
    """ルートがマッピングでない場合は PARSE_YAML_ERROR が発生すること。"""
    bad_file = tmp_path / "list.yaml"
    bad_file.write_text("- a\n- b\n")
    with pytest.raises(SessionAuthError) as exc_info:
        load_config(bad_file)
    assert exc_info.value.code == SessionAuthErrorCodes.PARSE_YAML


def test_load_validation_error(tmp_path: Path) -> None:
    """バリデーション失敗で VALIDATION_ERROR が発生すること。"""
    bad_config = tmp_path / "bad_config.yaml"
    bad_config.write_text("session_auth:\n  session_expires_in_seconds: 0\n")
    with pytest.raises(SessionAuthError) as exc_info:
        load_config(bad_config)
    assert exc_info.value.code == SessionAuthErrorCodes.VALIDATION
    assert isinstance(exc_info.value.__cause__, ValidationError)
