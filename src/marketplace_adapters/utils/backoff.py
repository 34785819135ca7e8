"""Retry policy and backoff delay calculation."""

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..constants import (
    DEFAULT_INITIAL_RETRY_DELAY_MS,
    DEFAULT_JITTER_RATIO,
    DEFAULT_MAX_RETRIES,
    DEFAULT_USE_EXPONENTIAL_BACKOFF,
)

if TYPE_CHECKING:
    from ..config import BatchConfig


@dataclass(frozen=True)
class RetryPolicy:
    """How a failed batch is retried.

    Attributes:
        max_retries: Retries after the first attempt (0 means a single try)
        initial_delay_ms: Delay before the first retry
        use_exponential_backoff: Double the delay on every retry when True
        jitter_ratio: Width of the random band around the delay, 0.4 gives 0.8-1.2
        max_delay_ms: Optional ceiling applied after jitter
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_ms: int = DEFAULT_INITIAL_RETRY_DELAY_MS
    use_exponential_backoff: bool = DEFAULT_USE_EXPONENTIAL_BACKOFF
    jitter_ratio: float = DEFAULT_JITTER_RATIO
    max_delay_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.max_retries, int) or self.max_retries < 0:
            raise ValueError(f"max_retries must be a non-negative integer, got {self.max_retries!r}")
        if self.initial_delay_ms <= 0:
            raise ValueError(f"initial_delay_ms must be positive, got {self.initial_delay_ms!r}")
        if not 0 <= self.jitter_ratio <= 1:
            raise ValueError(f"jitter_ratio must be within [0, 1], got {self.jitter_ratio!r}")
        if self.max_delay_ms is not None and self.max_delay_ms <= 0:
            raise ValueError(f"max_delay_ms must be positive, got {self.max_delay_ms!r}")

    @classmethod
    def from_config(cls, config: "BatchConfig") -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            initial_delay_ms=config.initial_retry_delay_ms,
            use_exponential_backoff=config.use_exponential_backoff,
        )


def next_delay(policy: RetryPolicy, attempt_index: int, rng: Optional[random.Random] = None) -> float:
    """Return the delay in milliseconds before retrying after ``attempt_index``.

    ``attempt_index`` is 0-based, so the first retry waits
    ``initial_delay_ms`` (times jitter when exponential).

    Args:
        policy: The retry policy in effect
        attempt_index: Index of the attempt that just failed
        rng: Random source for jitter, defaults to the module-level generator

    Returns:
        Delay in milliseconds
    """
    if attempt_index < 0:
        raise ValueError(f"attempt_index must be >= 0, got {attempt_index}")

    if not policy.use_exponential_backoff:
        delay = float(policy.initial_delay_ms)
    else:
        half_band = policy.jitter_ratio / 2
        jitter = (rng or random).uniform(1 - half_band, 1 + half_band)
        delay = policy.initial_delay_ms * (2**attempt_index) * jitter

    if policy.max_delay_ms is not None:
        delay = min(delay, float(policy.max_delay_ms))
    return delay


class BackoffCalculator:
    """Backoff delays for one policy with an injectable random source."""

    def __init__(self, policy: RetryPolicy, rng: Optional[random.Random] = None) -> None:
        self.policy = policy
        self.rng = rng or random.Random()

    def next_delay(self, attempt_index: int) -> float:
        return next_delay(self.policy, attempt_index, self.rng)

    def delays(self) -> list[float]:
        """All delays a batch would wait through if every attempt failed."""
        return [self.next_delay(attempt) for attempt in range(self.policy.max_retries)]
