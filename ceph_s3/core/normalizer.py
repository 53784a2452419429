"""アップロード対象の正規化"""
from typing import Dict, List, Mapping, Optional, Sequence, Set

from ..errors import MalformedPayloadError
from ..models.upload import (
    BytesPayload,
    PartialRequest,
    Payload,
    TextPayload,
    UploadRequest,
)
from ..utils.logger import LoggerManager


def to_payload(item: object) -> Payload:
    """呼び出し側の入力を閉じたバリアントに変換"""
    if isinstance(item, (BytesPayload, TextPayload, PartialRequest)):
        return item
    if isinstance(item, (bytes, bytearray, memoryview)):
        return BytesPayload(bytes(item))
    if isinstance(item, str):
        return TextPayload(item)
    if isinstance(item, UploadRequest):
        return PartialRequest(payload=item.payload, key=item.key, headers=item.headers)
    if isinstance(item, Mapping):
        # 旧クライアントの {buffer, filename, headers} 形式も受け付ける
        payload = item.get("payload", item.get("buffer"))
        key = item.get("key", item.get("filename"))
        return PartialRequest(payload=payload, key=key, headers=item.get("headers"))

    LoggerManager.get_logger().error(f"Malformed upload payload: {item!r:.200}")
    raise MalformedPayloadError(
        f"Unsupported payload type: {type(item).__name__}"
    )


def _coerce_bytes(value: object) -> Optional[bytes]:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return None


def _check_headers(headers: object) -> Dict[str, str]:
    if not isinstance(headers, Mapping):
        raise MalformedPayloadError(
            f"Headers must be a mapping, got {type(headers).__name__}"
        )
    for name, value in headers.items():
        if not isinstance(name, str) or not isinstance(value, str):
            raise MalformedPayloadError(
                f"Header names and values must be strings: {name!r}={value!r}"
            )
    return dict(headers)


class RequestNormalizer:
    """任意の入力を UploadRequest の列に変換"""

    def __init__(self):
        self.logger = LoggerManager.get_logger()

    def normalize(
        self,
        payloads: object,
        default_headers: Optional[Mapping[str, str]] = None,
        key_prefix: str = "",
    ) -> List[UploadRequest]:
        """入力を正規化

        Args:
            payloads: bytes / str / dict / PartialRequest / UploadRequest、またはそのリスト
            default_headers: 各リクエストに付与するヘッダー（個別指定が優先）
            key_prefix: 自動採番キーの接頭辞（例: "job1:" -> "job1:1", "job1:2", ...）

        Returns:
            入力順の UploadRequest のリスト

        Raises:
            MalformedPayloadError: 1件でも変換できない場合（部分的な結果は返さない）
        """
        defaults = _check_headers(default_headers or {})
        items: Sequence[object] = (
            payloads if isinstance(payloads, (list, tuple)) else [payloads]
        )

        auto_index = 0
        seen: Set[str] = set()
        requests: List[UploadRequest] = []

        for position, item in enumerate(items):
            payload = to_payload(item)

            if isinstance(payload, BytesPayload):
                data, key, headers = payload.data, None, {}
            elif isinstance(payload, TextPayload):
                data, key, headers = payload.text.encode("utf-8"), None, {}
            elif isinstance(payload, PartialRequest):
                data = _coerce_bytes(payload.payload)
                key = payload.key
                headers = _check_headers(payload.headers or {})
            else:
                raise MalformedPayloadError(f"Unsupported payload variant: {payload!r}")

            if data is None:
                self.logger.error(f"Malformed upload payload at index {position}: {item!r:.200}")
                raise MalformedPayloadError(
                    f"Payload at index {position} has no bytes or text content"
                )

            if key is not None and not isinstance(key, str):
                raise MalformedPayloadError(
                    f"Key at index {position} must be a string, got {type(key).__name__}"
                )
            if not key:
                auto_index += 1
                key = f"{key_prefix}{auto_index}"

            if key in seen:
                raise MalformedPayloadError(f"Duplicate key in batch: {key}")
            seen.add(key)

            requests.append(UploadRequest(payload=data, key=key, headers={**defaults, **headers}))

        return requests
