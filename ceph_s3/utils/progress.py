"""バッチアップロードの進捗管理"""
import threading
import time

from .logger import LoggerManager


class BatchProgress:
    """バッチ内の完了数を追跡"""

    def __init__(self, total: int, enabled: bool = True):
        self.total = total
        self.enabled = enabled
        self.completed = 0
        self.succeeded = 0
        self.failed = 0
        self.lock = threading.Lock()
        self.start_time = time.time()
        self.logger = LoggerManager.get_logger()

    def record(self, key: str, ok: bool) -> None:
        """1件の完了を記録"""
        with self.lock:
            self.completed += 1
            if ok:
                self.succeeded += 1
            else:
                self.failed += 1
            completed = self.completed

        if self.enabled and self.total:
            progress = completed / self.total * 100
            self.logger.info(
                f"{key}: {'done' if ok else 'failed'} - {progress:.1f}% ({completed}/{self.total})"
            )

    def complete(self) -> None:
        """バッチ完了"""
        elapsed_time = time.time() - self.start_time
        self.logger.info(
            f"Batch upload completed: {self.succeeded} successful, {self.failed} failed "
            f"- {elapsed_time:.1f}s"
        )
