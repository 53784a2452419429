"""Ceph S3 クライアントパッケージ"""
import asyncio
from typing import List, Mapping, Optional

from .errors import (
    CephS3Error,
    MalformedPayloadError,
    RetryExhaustedError,
    TransportError,
    UnknownUserError,
    UploadCancelledError,
)
from .models.config import ClientConfig, Config, LoggingConfig, RetryPolicy, UploadOptions
from .models.upload import (
    BatchResult,
    BytesPayload,
    Credential,
    Failure,
    PartialRequest,
    Success,
    TextPayload,
    UploadOutcome,
    UploadRequest,
)
from .utils.logger import LoggerManager
from .core.cancellation import CancellationToken
from .core.credentials import CredentialResolver
from .core.normalizer import RequestNormalizer, to_payload
from .core.s3_client import ObjectStoreClient, S3ClientManager
from .core.uploader import RetryUploader


class S3Client:
    """テナント単位の S3 クライアント"""

    def __init__(
        self,
        config: ClientConfig,
        resolver: Optional[CredentialResolver] = None,
        options: Optional[UploadOptions] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.config = config
        self.logger = LoggerManager.get_logger()
        self.resolver = resolver or CredentialResolver.from_file(config.users_file)

        # 認証情報の解決（失敗したら UnknownUserError）
        self.credential = self.resolver.resolve(config.username)

        client_manager = S3ClientManager(config, self.credential)
        self.store = ObjectStoreClient(client_manager.get_client(), config)
        self.normalizer = RequestNormalizer()
        self.uploader = RetryUploader(self.store, options)
        self.retry_policy = retry_policy or RetryPolicy()

    @classmethod
    def from_file(
        cls, config_path: str = "config.json", resolver: Optional[CredentialResolver] = None
    ) -> 'S3Client':
        """設定ファイルから作成"""
        config = Config.from_file(config_path)
        LoggerManager.setup(config.logging)
        return cls(config.s3, resolver, options=config.options, retry_policy=config.retry)

    def connect(self) -> None:
        """バケットが使えることを確認"""
        self.store.ensure_bucket()

    def get_file(self, key: str, headers: Optional[Mapping[str, str]] = None):
        """オブジェクトの読み取りストリームを返す"""
        return self.store.get_object(key, headers)

    def store_file(self, request: object) -> str:
        """1ファイルを保存してキーを返す（リトライなし、キー指定必須）"""
        if isinstance(request, UploadRequest):
            return self.store.put_object(request)
        payload = to_payload(request)
        if not isinstance(payload, PartialRequest) or not payload.key:
            raise MalformedPayloadError("store_file requires an explicit key")
        normalized = self.normalizer.normalize([payload])
        return self.store.put_object(normalized[0])

    def normalize(
        self,
        payloads: object,
        headers: Optional[Mapping[str, str]] = None,
        prefix: str = "",
    ) -> List[UploadRequest]:
        return self.normalizer.normalize(payloads, headers, prefix)

    def store_files_with_retry(
        self,
        payloads: object,
        retry_policy: Optional[RetryPolicy] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        prefix: str = "",
        cancel: Optional[CancellationToken] = None,
    ) -> BatchResult:
        """複数ファイルをリトライ付きで保存

        正規化エラーは通信前に送出される。個々のアップロードの失敗は
        BatchResult 内の Failure として返る。
        """
        requests = self.normalizer.normalize(payloads, headers, prefix)
        policy = retry_policy or self.retry_policy
        return asyncio.run(self.uploader.upload_all(requests, policy, cancel))


__all__ = [
    'S3Client',
    'ClientConfig',
    'Config',
    'LoggingConfig',
    'RetryPolicy',
    'UploadOptions',
    'Credential',
    'CredentialResolver',
    'RequestNormalizer',
    'ObjectStoreClient',
    'S3ClientManager',
    'RetryUploader',
    'CancellationToken',
    'BatchResult',
    'BytesPayload',
    'TextPayload',
    'PartialRequest',
    'UploadRequest',
    'UploadOutcome',
    'Success',
    'Failure',
    'CephS3Error',
    'UnknownUserError',
    'MalformedPayloadError',
    'TransportError',
    'RetryExhaustedError',
    'UploadCancelledError',
]
