"""リトライ付きバッチアップロード"""
import asyncio
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from ..errors import RetryExhaustedError, TransportError, UploadCancelledError
from ..models.config import RetryPolicy, UploadOptions
from ..models.upload import (
    AttemptState,
    BatchResult,
    Failure,
    Success,
    UploadOutcome,
    UploadRequest,
)
from ..utils.logger import LoggerManager
from ..utils.progress import BatchProgress
from .backoff import FibonacciBackoff
from .cancellation import CancellationToken
from .s3_client import ObjectStoreClient


class RetryUploader:
    """リクエストごとに独立したリトライループでアップロード"""

    def __init__(
        self,
        store: ObjectStoreClient,
        options: Optional[UploadOptions] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.options = options or UploadOptions()
        self.logger = LoggerManager.get_logger()
        self._rng = rng or random.Random()

    async def upload_all(
        self,
        requests: Sequence[UploadRequest],
        policy: Optional[RetryPolicy] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> BatchResult:
        """複数リクエストを並列でアップロード

        Args:
            requests: 正規化済みのリクエスト
            policy: リトライ設定（省略時はデフォルト）
            cancel: キャンセル信号

        Returns:
            入力と同じ順序の BatchResult（1リクエストにつき1件）
        """
        policy = policy or RetryPolicy()
        cancel = cancel or CancellationToken()
        total = len(requests)
        if total == 0:
            return BatchResult([])

        workers = self.options.max_concurrency or total
        self.logger.info(
            f"Starting upload of {total} objects with concurrency {workers}, "
            f"max {policy.max_attempts} attempts each"
        )

        progress = BatchProgress(total, self.options.enable_progress)
        limiter = asyncio.Semaphore(workers)

        # asyncio 側でキャンセルされても実行中の boto3 呼び出しを待たない
        pool = ThreadPoolExecutor(max_workers=workers)
        try:
            outcomes = await asyncio.gather(
                *(
                    self._upload_tracked(request, policy, limiter, pool, cancel, progress)
                    for request in requests
                )
            )
        finally:
            pool.shutdown(wait=False)

        progress.complete()
        return BatchResult(list(outcomes))

    async def _upload_tracked(
        self,
        request: UploadRequest,
        policy: RetryPolicy,
        limiter: asyncio.Semaphore,
        pool: ThreadPoolExecutor,
        cancel: CancellationToken,
        progress: BatchProgress,
    ) -> UploadOutcome:
        """完了した時点で進捗を記録"""
        try:
            outcome = await self._upload_one(request, policy, limiter, pool, cancel)
        except Exception as e:
            self.logger.error(f"Upload task exception for {request.key}: {e}")
            outcome = UploadOutcome(request.key, Failure(e))
        progress.record(outcome.key, outcome.ok)
        return outcome

    async def _upload_one(
        self,
        request: UploadRequest,
        policy: RetryPolicy,
        limiter: asyncio.Semaphore,
        pool: ThreadPoolExecutor,
        cancel: CancellationToken,
    ) -> UploadOutcome:
        """1リクエスト分のリトライループ"""
        loop = asyncio.get_running_loop()
        backoff = FibonacciBackoff.from_policy(policy, self._rng)
        state = AttemptState()
        last_error: Optional[TransportError] = None

        while state.attempt_number < policy.max_attempts:
            async with limiter:
                if cancel.cancelled:
                    return self._cancelled(request, state)

                state.attempt_number += 1
                try:
                    await loop.run_in_executor(pool, self.store.put_object, request)
                except TransportError as e:
                    last_error = e
                else:
                    if cancel.cancelled:
                        return self._cancelled(request, state)
                    self.logger.info(f"Successfully uploaded {request.key} to {self.store.bucket}")
                    return UploadOutcome(
                        request.key, Success(request.key), state.attempt_number, list(state.delays)
                    )

            if cancel.cancelled:
                return self._cancelled(request, state)
            if state.attempt_number >= policy.max_attempts:
                break

            # バックオフ
            delay = backoff.next()
            state.last_delay = delay
            state.delays.append(delay)
            self.logger.warning(
                f"Upload failed (attempt {state.attempt_number}/{policy.max_attempts}), "
                f"retrying in {delay:.2f}s: {request.key}: {last_error}"
            )
            if await cancel.sleep(delay):
                return self._cancelled(request, state)

        self.logger.error(
            f"Upload failed after {state.attempt_number} attempts: {request.key}: {last_error}"
        )
        return UploadOutcome(
            request.key,
            Failure(RetryExhaustedError(last_error, state.attempt_number)),
            state.attempt_number,
            list(state.delays),
        )

    def _cancelled(self, request: UploadRequest, state: AttemptState) -> UploadOutcome:
        self.logger.info(f"Upload cancelled after {state.attempt_number} attempts: {request.key}")
        return UploadOutcome(
            request.key,
            Failure(UploadCancelledError(request.key)),
            state.attempt_number,
            list(state.delays),
        )
