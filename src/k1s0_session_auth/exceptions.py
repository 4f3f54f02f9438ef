"""session_auth ライブラリの例外型定義"""

from __future__ import annotations


class SessionAuthError(Exception):
    """session_auth ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class SessionAuthErrorCodes:
    """SessionAuthError のエラーコード定数。"""

    STORAGE_FAILURE: str = "STORAGE_FAILURE"
    INVALID_ARGUMENT: str = "INVALID_ARGUMENT"
    DECODE_ERROR: str = "DECODE_ERROR"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
