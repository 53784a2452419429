"""S3クライアント管理"""
from typing import Any, Dict, Mapping, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import TransportError
from ..models.config import ClientConfig
from ..models.upload import Credential, UploadRequest
from ..utils.logger import LoggerManager

# getObject で転送するヘッダー
GET_HEADER_WHITELIST: Dict[str, str] = {
    "range": "Range",
    "if-modified-since": "IfModifiedSince",
    "if-unmodified-since": "IfUnmodifiedSince",
    "if-match": "IfMatch",
    "if-none-match": "IfNoneMatch",
}

# putObject のヘッダーと boto3 パラメータの対応
PUT_HEADER_PARAMS: Dict[str, str] = {
    "content-type": "ContentType",
    "content-encoding": "ContentEncoding",
    "content-disposition": "ContentDisposition",
    "content-language": "ContentLanguage",
    "cache-control": "CacheControl",
    "expires": "Expires",
    "content-md5": "ContentMD5",
}

METADATA_PREFIX = "x-amz-meta-"


def _status_code(response: Mapping[str, Any]) -> Optional[int]:
    return response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _client_error_status(error: ClientError) -> Optional[int]:
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _client_error_code(error: ClientError) -> Optional[str]:
    return error.response.get("Error", {}).get("Code")


class S3ClientManager:
    """S3クライアントの作成と管理"""

    def __init__(self, client_config: ClientConfig, credential: Credential):
        self.client_config = client_config
        self.credential = credential
        self.logger = LoggerManager.get_logger()
        self._client = None

    def get_client(self):
        """S3クライアントを取得（必要に応じて作成）"""
        if self._client is None:
            self._client = self.create_client()
        return self._client

    def create_client(self):
        """S3クライアントを作成"""
        config = self.client_config
        try:
            s3_client = boto3.client(
                's3',
                endpoint_url=config.endpoint_url,
                region_name=config.region,
                aws_access_key_id=self.credential.access_key,
                aws_secret_access_key=self.credential.secret_key,
                use_ssl=config.secure,
                config=BotoConfig(s3={"addressing_style": config.addressing_style}),
            )
            self.logger.info(
                f"S3 client created for user {config.username} at {config.endpoint_url} "
                f"({config.style} style)"
            )
            return s3_client

        except Exception as e:
            self.logger.error(f"Error creating S3 client: {e}")
            raise


class ObjectStoreClient:
    """単一オブジェクトの put/get とバケット作成"""

    def __init__(self, s3_client, client_config: ClientConfig):
        self.s3_client = s3_client
        self.client_config = client_config
        self.bucket = client_config.bucket
        self.logger = LoggerManager.get_logger()

    def ensure_bucket(self) -> None:
        """バケットを作成（200以外は TransportError）"""
        try:
            response = self.s3_client.create_bucket(Bucket=self.bucket)
        except ClientError as e:
            code = _client_error_code(e)
            if code == "BucketAlreadyOwnedByYou" and not self.client_config.strict_bucket_check:
                self.logger.info(f"Bucket {self.bucket} already exists")
                return
            raise TransportError(
                f"Couldn't create bucket {self.bucket}: {e}", _client_error_status(e)
            ) from e
        except BotoCoreError as e:
            raise TransportError(f"Couldn't create bucket {self.bucket}: {e}") from e

        status = _status_code(response)
        if status != 200:
            raise TransportError(
                f"Couldn't create bucket {self.bucket}: response status code is {status}",
                status,
            )
        self.logger.info(f"Bucket {self.bucket} is ready")

    def put_object(self, request: UploadRequest) -> str:
        """1オブジェクトをアップロードしてキーを返す"""
        params = self._put_params(request.headers)
        try:
            response = self.s3_client.put_object(
                Bucket=self.bucket,
                Key=request.key,
                Body=request.payload,
                **params
            )
        except ClientError as e:
            raise TransportError(
                f"Error uploading {request.key}: {e}", _client_error_status(e)
            ) from e
        except BotoCoreError as e:
            raise TransportError(f"Error uploading {request.key}: {e}") from e

        status = _status_code(response)
        if status != 200:
            raise TransportError(f"response status code is {status}", status)
        return request.key

    def get_object(self, key: str, headers: Optional[Mapping[str, str]] = None):
        """オブジェクトのストリームを返す（ヘッダーはホワイトリストのみ）"""
        params = {
            GET_HEADER_WHITELIST[name.lower()]: value
            for name, value in (headers or {}).items()
            if name.lower() in GET_HEADER_WHITELIST
        }
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key, **params)
        except ClientError as e:
            raise TransportError(f"Error downloading {key}: {e}", _client_error_status(e)) from e
        except BotoCoreError as e:
            raise TransportError(f"Error downloading {key}: {e}") from e

        status = _status_code(response)
        if status not in (200, 206):
            raise TransportError(f"response status code is {status}", status)
        return response["Body"]

    def _put_params(self, headers: Mapping[str, str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        metadata: Dict[str, str] = {}
        for name, value in headers.items():
            lowered = name.lower()
            if lowered in PUT_HEADER_PARAMS:
                params[PUT_HEADER_PARAMS[lowered]] = value
            elif lowered.startswith(METADATA_PREFIX):
                metadata[lowered[len(METADATA_PREFIX):]] = value
            else:
                self.logger.debug(f"Dropping unsupported upload header: {name}")
        if metadata:
            params["Metadata"] = metadata
        return params
