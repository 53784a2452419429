"""テナントごとの認証情報管理"""
import json
import os
import threading
from typing import Dict, List, Mapping, Optional, Union

from ..errors import UnknownUserError
from ..models.upload import Credential
from ..utils.logger import LoggerManager

# users.json が無い場合に使うテスト用認証情報
DEFAULT_USERS: Dict[str, Dict[str, str]] = {
    "test": {
        "access_key": "123",
        "secret_key": "abc",
    }
}

CredentialLike = Union[Credential, Mapping[str, str]]


class CredentialResolver:
    """ユーザー名から認証情報を引くレジストリ

    全ての操作はロックで直列化される。
    """

    def __init__(self, users: Optional[Mapping[str, CredentialLike]] = None):
        self._lock = threading.Lock()
        self._users: Dict[str, Credential] = {}
        self.logger = LoggerManager.get_logger()
        if users:
            self.register(users)

    @classmethod
    def from_file(cls, path: str = "users.json") -> 'CredentialResolver':
        """users.json から読み込み（無ければテスト用認証情報）"""
        if not os.path.exists(path):
            LoggerManager.get_logger().info(
                f"Credential file {path} not found, using built-in test credentials"
            )
            return cls(DEFAULT_USERS)

        try:
            with open(path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Credential file {path} must contain a JSON object")

        return cls(data)

    def resolve(self, username: str) -> Credential:
        with self._lock:
            credential = self._users.get(username)
        if credential is None:
            raise UnknownUserError(username)
        return credential

    def register(self, users: Mapping[str, CredentialLike]) -> None:
        """認証情報をマージ（同じユーザー名は上書き）"""
        entries = {
            username: value if isinstance(value, Credential) else Credential.from_dict(value)
            for username, value in users.items()
        }
        with self._lock:
            self._users.update(entries)
        self.logger.debug(f"Registered credentials for {len(entries)} user(s)")

    def revoke(self, username: str) -> None:
        """認証情報を削除（未登録なら何もしない）"""
        with self._lock:
            removed = self._users.pop(username, None)
        if removed is not None:
            self.logger.debug(f"Revoked credentials for user {username}")

    def usernames(self) -> List[str]:
        with self._lock:
            return sorted(self._users)

    def __contains__(self, username: object) -> bool:
        with self._lock:
            return username in self._users
