"""例外クラス定義"""
from typing import Optional


class CephS3Error(Exception):
    """ceph_s3 の基底例外"""


class UnknownUserError(CephS3Error, KeyError):
    """ユーザー名に対応する認証情報が存在しない"""

    def __init__(self, username: str):
        self.username = username
        super().__init__(username)

    def __str__(self) -> str:
        return f"Unknown user: {self.username!r}"


class MalformedPayloadError(CephS3Error, ValueError):
    """アップロード対象をリクエストに変換できない"""


class TransportError(CephS3Error):
    """オブジェクトストアが成功以外を返した"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetryExhaustedError(CephS3Error):
    """リトライ上限に達した"""

    def __init__(self, last_error: TransportError, attempts: int):
        super().__init__(f"Upload failed after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class UploadCancelledError(CephS3Error):
    """バッチがキャンセルされた"""

    def __init__(self, key: str):
        super().__init__(f"Upload cancelled: {key}")
        self.key = key
