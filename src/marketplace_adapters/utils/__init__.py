"""Utility modules for resilient marketplace API operations."""

from .backoff import BackoffCalculator, RetryPolicy, next_delay
from .batch import BatchError, BatchExecutor, BatchOutcome, split_into_batches
from .decorators import handle_api_errors
from .error_mapper import create_error, map_http_error, map_to_error_kind
from .pagination import Page, collect_all
from .rate_limiter import RateLimiter
from .validators import (
    validate_amazon_order_id,
    validate_api_version,
    validate_capability_name,
    validate_iso8601_date,
    validate_page_size,
)

__all__ = [
    "BackoffCalculator",
    "BatchError",
    "BatchExecutor",
    "BatchOutcome",
    "Page",
    "RateLimiter",
    "RetryPolicy",
    "collect_all",
    "create_error",
    "handle_api_errors",
    "map_http_error",
    "map_to_error_kind",
    "next_delay",
    "split_into_batches",
    "validate_amazon_order_id",
    "validate_api_version",
    "validate_capability_name",
    "validate_iso8601_date",
    "validate_page_size",
]
