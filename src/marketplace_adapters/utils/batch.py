"""Bounded-concurrency batch execution with per-batch retry.

Retries are batch-granular: when any part of a batch fails, the whole batch
is executed again. Unit-of-work callables must therefore be safe to re-run
in full for the same batch.
"""

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from ..constants import (
    DEFAULT_CONTINUE_ON_ERROR,
    DEFAULT_DELAY_BETWEEN_BATCHES_MS,
    DEFAULT_MAX_CONCURRENT_BATCHES,
)
from ..exceptions import ErrorRecord
from .backoff import RetryPolicy, next_delay
from .error_mapper import map_http_error

if TYPE_CHECKING:
    from ..config import BatchConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

UnitOfWork = Callable[[list[T]], Awaitable[R]]
SleepFunction = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class BatchError:
    """A batch that exhausted its retries."""

    batch_index: int
    error: ErrorRecord
    attempts: int = 1


@dataclass
class BatchOutcome(Generic[R]):
    """Results and failures of one executor run.

    In concurrent mode ``results`` and ``errors`` are in completion order,
    not batch order. ``errors[i].batch_index`` always identifies the batch.
    Batches never started after a stop are absent from both lists.
    """

    results: list[R] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)
    batches_total: int = 0
    batches_attempted: int = 0
    stopped_early: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.errors and not self.stopped_early

    @property
    def failed_batch_indexes(self) -> list[int]:
        return [error.batch_index for error in self.errors]


def split_into_batches(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split items into contiguous batches of at most ``batch_size``."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(items[start : start + batch_size]) for start in range(0, len(items), batch_size)]


class _RetryExhausted(Exception):
    def __init__(self, error: BaseException, attempts: int) -> None:
        super().__init__(str(error))
        self.error = error
        self.attempts = attempts


class BatchExecutor:
    """Runs a unit of work over batches of items.

    The executor keeps no state between runs; a single instance may be
    reused or shared.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: SleepFunction = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            policy: Default retry policy for runs that don't pass their own
            sleep: Awaitable sleep taking seconds, replaceable in tests
            rng: Random source for backoff jitter
        """
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.rng = rng

    async def _sleep_ms(self, delay_ms: float) -> None:
        if delay_ms > 0:
            await self.sleep(delay_ms / 1000)

    async def _run_with_retry(
        self,
        batch: list[T],
        batch_index: int,
        unit_of_work: UnitOfWork,
        policy: RetryPolicy,
        run_id: str,
    ) -> R:
        attempt = 0
        while True:
            try:
                return await unit_of_work(batch)
            except Exception as e:
                if attempt == policy.max_retries:
                    raise _RetryExhausted(e, attempt + 1) from e
                delay_ms = next_delay(policy, attempt, self.rng)
                logger.warning(
                    f"Run {run_id}: batch {batch_index} attempt {attempt + 1} failed ({e}), "
                    f"retrying in {int(delay_ms)}ms"
                )
                await self._sleep_ms(delay_ms)
                attempt += 1

    async def _execute_batch(
        self,
        batch: list[T],
        batch_index: int,
        unit_of_work: UnitOfWork,
        policy: RetryPolicy,
        outcome: BatchOutcome,
        run_id: str,
    ) -> bool:
        # Accumulators are only touched from the event loop thread
        outcome.batches_attempted += 1
        try:
            result = await self._run_with_retry(batch, batch_index, unit_of_work, policy, run_id)
        except _RetryExhausted as exhausted:
            mapped = map_http_error(exhausted.error, f"batch_executor.batch[{batch_index}]")
            outcome.errors.append(BatchError(batch_index, mapped.record, exhausted.attempts))
            logger.error(
                f"Run {run_id}: batch {batch_index} failed after {exhausted.attempts} attempts: "
                f"{mapped.record.kind.value} {mapped.record.message}"
            )
            return False
        outcome.results.append(result)
        return True

    async def run(
        self,
        items: Sequence[T],
        batch_size: int,
        unit_of_work: UnitOfWork,
        policy: Optional[RetryPolicy] = None,
        *,
        max_concurrent_batches: int = DEFAULT_MAX_CONCURRENT_BATCHES,
        delay_between_batches_ms: int = DEFAULT_DELAY_BETWEEN_BATCHES_MS,
        continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    ) -> BatchOutcome:
        """Process ``items`` in batches.

        With ``max_concurrent_batches`` of 1 batches run strictly in order.
        Larger values group batches into chunks that run concurrently, with
        chunks processed one after the other. ``delay_between_batches_ms`` is
        waited between sequential steps to stay under upstream rate limits.

        Failed batches never raise. They are recorded in ``errors`` and, when
        ``continue_on_error`` is False, processing stops after the step that
        contained the first failure.

        Args:
            items: Work items, never inspected by the executor
            batch_size: Maximum items per batch
            unit_of_work: Coroutine function called with each batch
            policy: Retry policy, defaults to the executor's policy
            max_concurrent_batches: Batches in flight at once
            delay_between_batches_ms: Pause between batches or chunks
            continue_on_error: Keep going after a batch exhausts its retries

        Returns:
            BatchOutcome owned by the caller
        """
        if max_concurrent_batches <= 0:
            raise ValueError(f"max_concurrent_batches must be positive, got {max_concurrent_batches}")
        if delay_between_batches_ms < 0:
            raise ValueError(f"delay_between_batches_ms cannot be negative, got {delay_between_batches_ms}")

        policy = policy or self.policy
        batches = split_into_batches(items, batch_size)
        outcome: BatchOutcome = BatchOutcome(batches_total=len(batches))
        run_id = str(uuid.uuid4())
        start_time = datetime.now()

        logger.info(
            f"Run {run_id}: Starting {len(items)} items in {len(batches)} batches "
            f"(size={batch_size}, concurrency={max_concurrent_batches})"
        )

        chunks = [
            list(range(start, min(start + max_concurrent_batches, len(batches))))
            for start in range(0, len(batches), max_concurrent_batches)
        ]

        for position, chunk in enumerate(chunks):
            if len(chunk) == 1:
                index = chunk[0]
                succeeded = [await self._execute_batch(batches[index], index, unit_of_work, policy, outcome, run_id)]
            else:
                succeeded = await asyncio.gather(
                    *(
                        self._execute_batch(batches[index], index, unit_of_work, policy, outcome, run_id)
                        for index in chunk
                    )
                )

            if not all(succeeded) and not continue_on_error:
                outcome.stopped_early = position < len(chunks) - 1
                logger.warning(f"Run {run_id}: Stopping after batch failure, continue_on_error is disabled")
                break

            if position < len(chunks) - 1:
                await self._sleep_ms(delay_between_batches_ms)

        duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
        logger.info(
            f"Run {run_id}: Completed {outcome.batches_attempted}/{len(batches)} batches in {duration_ms}ms, "
            f"{len(outcome.errors)} failed"
        )
        return outcome

    async def run_with_config(
        self,
        items: Sequence[T],
        unit_of_work: UnitOfWork,
        config: "BatchConfig",
    ) -> BatchOutcome:
        """Run with every option taken from a BatchConfig."""
        return await self.run(
            items,
            config.batch_size,
            unit_of_work,
            config.to_policy(),
            max_concurrent_batches=config.max_concurrent_batches,
            delay_between_batches_ms=config.delay_between_batches_ms,
            continue_on_error=config.continue_on_error,
        )
