"""アップロード関連のデータクラス"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union, overload


@dataclass(frozen=True)
class Credential:
    """アクセスキーとシークレットキー"""
    access_key: str
    secret_key: str

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Credential':
        """users.json 形式の辞書から作成"""
        try:
            return cls(access_key=data["access_key"], secret_key=data["secret_key"])
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid credential entry: {e}")

    def __repr__(self) -> str:
        return f"Credential(access_key={self.access_key!r}, secret_key='***')"


@dataclass
class UploadRequest:
    """正規化済みのアップロードリクエスト"""
    payload: bytes
    key: str
    headers: Dict[str, str] = field(default_factory=dict)


# 正規化前の入力（閉じた集合）
@dataclass(frozen=True)
class BytesPayload:
    data: bytes


@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass
class PartialRequest:
    """キーやヘッダーが未指定でもよいリクエスト"""
    payload: object
    key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None


Payload = Union[BytesPayload, TextPayload, PartialRequest]


@dataclass
class AttemptState:
    """1リクエスト分のリトライ状態"""
    attempt_number: int = 0
    last_delay: float = 0.0
    delays: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class Success:
    key: str


@dataclass(frozen=True)
class Failure:
    error: Exception


@dataclass
class UploadOutcome:
    """リトライを含めた最終結果"""
    key: str
    result: Union[Success, Failure]
    attempts: int = 0
    delays: List[float] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return isinstance(self.result, Success)

    @property
    def error(self) -> Optional[Exception]:
        if isinstance(self.result, Failure):
            return self.result.error
        return None


class BatchResult:
    """入力順の結果一覧。位置でもキーでも参照できる"""

    def __init__(self, outcomes: List[UploadOutcome]):
        self._outcomes = list(outcomes)
        self._by_key = {outcome.key: outcome for outcome in self._outcomes}

    @overload
    def __getitem__(self, item: int) -> UploadOutcome: ...

    @overload
    def __getitem__(self, item: str) -> UploadOutcome: ...

    def __getitem__(self, item):
        if isinstance(item, str):
            return self._by_key[item]
        return self._outcomes[item]

    def __len__(self) -> int:
        return len(self._outcomes)

    def __iter__(self) -> Iterator[UploadOutcome]:
        return iter(self._outcomes)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def keys(self) -> List[str]:
        return [outcome.key for outcome in self._outcomes]

    @property
    def succeeded(self) -> List[UploadOutcome]:
        return [outcome for outcome in self._outcomes if outcome.ok]

    @property
    def failed(self) -> List[UploadOutcome]:
        return [outcome for outcome in self._outcomes if not outcome.ok]

    def __repr__(self) -> str:
        return (
            f"BatchResult(total={len(self)}, succeeded={len(self.succeeded)}, "
            f"failed={len(self.failed)})"
        )
