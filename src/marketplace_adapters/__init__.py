"""Resilient batch execution and capability modules for marketplace APIs."""

from .api import ApiResponse, BaseCapabilityModule, CapabilityModule, ModuleRegistry, create_module
from .config import BatchConfig, VersionConfig
from .exceptions import ErrorKind, ErrorRecord, HttpError, MarketplaceAPIError, RateLimitError
from .utils import (
    BackoffCalculator,
    BatchExecutor,
    BatchOutcome,
    Page,
    RetryPolicy,
    collect_all,
    create_error,
    map_http_error,
    map_to_error_kind,
)

__version__ = "1.0.0"

__all__ = [
    "ApiResponse",
    "BackoffCalculator",
    "BaseCapabilityModule",
    "BatchConfig",
    "BatchExecutor",
    "BatchOutcome",
    "CapabilityModule",
    "ErrorKind",
    "ErrorRecord",
    "HttpError",
    "MarketplaceAPIError",
    "ModuleRegistry",
    "Page",
    "RateLimitError",
    "RetryPolicy",
    "VersionConfig",
    "collect_all",
    "create_error",
    "create_module",
    "map_http_error",
    "map_to_error_kind",
]
