"""設定管理用のデータクラス"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import json
import os
import re


@dataclass
class LoggingConfig:
    """ロギング設定"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class ClientConfig:
    """オブジェクトストアへの接続設定"""
    username: str
    endpoint: str = "10.10.100.69"
    port: int = 6788
    bucket: str = "arkapi"
    secure: bool = False
    style: str = "path"
    region: str = "us-east-1"
    users_file: str = "users.json"
    strict_bucket_check: bool = True

    def __post_init__(self):
        """接続設定のバリデーション"""
        if not self.username or not self.username.strip():
            raise ValueError("username cannot be empty")

        if not self.endpoint:
            raise ValueError("endpoint cannot be empty")

        if not (0 < int(self.port) < 65536):
            raise ValueError(f"Invalid port: {self.port}. Must be between 1 and 65535")
        self.port = int(self.port)

        # S3のバケット命名規則（3-63文字、小文字英数字・ハイフン・ピリオド）
        bucket_pattern = r'^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$'
        if not re.match(bucket_pattern, self.bucket):
            raise ValueError(
                f"Invalid bucket name: {self.bucket}. "
                "Must be 3-63 characters of lowercase letters, digits, hyphens and periods"
            )

        if self.style not in ("path", "virtual-host"):
            raise ValueError(
                f"Invalid style: {self.style}. Expected 'path' or 'virtual-host'"
            )

    @property
    def endpoint_url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.endpoint}:{self.port}"

    @property
    def addressing_style(self) -> str:
        """botocore の addressing_style 値"""
        return "path" if self.style == "path" else "virtual"

    @classmethod
    def from_env(cls, username: str, **overrides: Any) -> 'ClientConfig':
        """環境変数から作成"""
        values: Dict[str, Any] = {
            "endpoint": os.environ.get("S3_ENDPOINT", "10.10.100.69"),
            "port": int(os.environ.get("S3_PORT", 6788)),
            "bucket": os.environ.get("S3_BUCKET", "arkapi"),
            "secure": os.environ.get("S3_PROTO") == "https",
            "users_file": os.environ.get("S3_USERS_FILE", "users.json"),
        }
        values.update(overrides)
        return cls(username=username, **values)


@dataclass
class RetryPolicy:
    """バッチアップロードのリトライ設定（秒単位）"""
    initial_delay: float = 1.0
    max_delay: float = 600.0
    jitter_factor: float = 0.3
    max_attempts: int = 5

    def __post_init__(self):
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay < 0:
            raise ValueError(f"max_delay must be >= 0, got {self.max_delay}")
        if not (0.0 <= self.jitter_factor <= 1.0):
            raise ValueError(
                f"Invalid jitter_factor: {self.jitter_factor}. Must be between 0 and 1"
            )
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RetryPolicy':
        """辞書から作成（旧クライアントのオプション名にも対応）"""
        values: Dict[str, Any] = {}

        # 旧形式はミリ秒指定
        if "initialDelay" in data:
            values["initial_delay"] = float(data["initialDelay"]) / 1000.0
        if "maxDelay" in data:
            values["max_delay"] = float(data["maxDelay"]) / 1000.0
        if "randomisationFactor" in data:
            values["jitter_factor"] = float(data["randomisationFactor"])
        if "retryCount" in data:
            values["max_attempts"] = int(data["retryCount"])

        for name in ("initial_delay", "max_delay", "jitter_factor"):
            if name in data:
                values[name] = float(data[name])
        if "max_attempts" in data:
            values["max_attempts"] = int(data["max_attempts"])

        return cls(**values)


@dataclass
class UploadOptions:
    """アップロードオプション"""
    max_concurrency: Optional[int] = None  # None: リクエストごとに1スロット
    enable_progress: bool = True

    def __post_init__(self):
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be >= 1 or None, got {self.max_concurrency}"
            )


@dataclass
class Config:
    """メイン設定クラス"""
    logging: LoggingConfig
    s3: ClientConfig
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    options: UploadOptions = field(default_factory=UploadOptions)

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """設定ファイルから読み込み"""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file {config_path} not found.")

        try:
            with open(config_path, "r", encoding="utf-8") as file:
                data = json.load(file)

            # 各セクションをパース
            logging_config = LoggingConfig(**data.get("logging", {}))
            s3_config = ClientConfig(**data.get("s3", {}))
            retry_policy = RetryPolicy.from_dict(data.get("retry", {}))
            options = UploadOptions(**data.get("options", {}))

            return cls(
                logging=logging_config,
                s3=s3_config,
                retry=retry_policy,
                options=options,
            )

        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {config_path}: {e}")
        except Exception as e:
            raise RuntimeError(f"Error loading configuration: {e}") from e
