"""フィボナッチ型バックオフ"""
import random
from typing import Optional

from ..models.config import RetryPolicy


class FibonacciBackoff:
    """リトライ間隔を計算する（リトライ系列ごとに1インスタンス）"""

    def __init__(
        self,
        initial_delay: float = 1.0,
        max_delay: float = 600.0,
        jitter_factor: float = 0.0,
        rng: Optional[random.Random] = None,
    ):
        if initial_delay < 0 or max_delay < 0:
            raise ValueError("delays must be >= 0")
        if not (0.0 <= jitter_factor <= 1.0):
            raise ValueError(f"Invalid jitter_factor: {jitter_factor}")

        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.jitter_factor = jitter_factor
        self._rng = rng or random.Random()
        self.reset()

    @classmethod
    def from_policy(cls, policy: RetryPolicy, rng: Optional[random.Random] = None) -> 'FibonacciBackoff':
        return cls(
            initial_delay=policy.initial_delay,
            max_delay=policy.max_delay,
            jitter_factor=policy.jitter_factor,
            rng=rng,
        )

    def reset(self) -> None:
        # (d[n-1], d[n]) の組。d[-1] = 0
        self._previous = 0.0
        self._current = min(self.initial_delay, self.max_delay)

    def base_delay(self, attempt: int) -> float:
        """ジッター無しの n 番目（0始まり）の間隔"""
        if attempt < 0:
            raise ValueError(f"attempt must be >= 0, got {attempt}")
        previous, current = 0.0, min(self.initial_delay, self.max_delay)
        for _ in range(attempt):
            previous, current = current, min(self.max_delay, previous + current)
        return current

    def next(self) -> float:
        """次の間隔を返して状態を進める"""
        base = self._current
        self._previous, self._current = (
            self._current,
            min(self.max_delay, self._previous + self._current),
        )
        return self._jitter(base)

    def _jitter(self, base: float) -> float:
        if self.jitter_factor == 0:
            return base
        delay = base + base * self.jitter_factor * self._rng.uniform(-1.0, 1.0)
        return min(self.max_delay, max(0.0, delay))
