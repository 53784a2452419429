"""バッチのキャンセル"""
import asyncio
import threading
from typing import List, Tuple


class CancellationToken:
    """任意のスレッドから cancel() できるキャンセル信号"""

    def __init__(self):
        self._flag = threading.Event()
        self._lock = threading.Lock()
        self._waiters: List[Tuple[asyncio.AbstractEventLoop, asyncio.Event]] = []

    @property
    def cancelled(self) -> bool:
        return self._flag.is_set()

    def cancel(self) -> None:
        with self._lock:
            self._flag.set()
            waiters = list(self._waiters)
        for loop, event in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(event.set)

    async def sleep(self, delay: float) -> bool:
        """delay 秒待つ。途中でキャンセルされたら True"""
        if self.cancelled:
            return True

        loop = asyncio.get_running_loop()
        event = asyncio.Event()
        waiter = (loop, event)
        with self._lock:
            self._waiters.append(waiter)
        try:
            # 登録前に cancel() された場合
            if self.cancelled:
                return True
            try:
                await asyncio.wait_for(event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
            return self.cancelled
        finally:
            with self._lock:
                self._waiters.remove(waiter)
