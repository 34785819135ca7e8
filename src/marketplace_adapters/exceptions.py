"""Common exceptions and the canonical error vocabulary for marketplace adapters."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Vendor-agnostic classification of a failure."""

    UNAUTHORIZED = "Unauthorized"
    RATE_LIMIT_EXCEEDED = "RateLimitExceeded"
    QUOTA_EXCEEDED = "QuotaExceeded"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    PRODUCT_NOT_FOUND = "ProductNotFound"
    ORDER_NOT_FOUND = "OrderNotFound"
    ASIN_NOT_FOUND = "AsinNotFound"
    SKU_NOT_FOUND = "SkuNotFound"
    INVALID_INPUT = "InvalidInput"
    INVALID_REQUEST = "InvalidRequest"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    INTERNAL_ERROR = "InternalError"
    INITIALIZATION_ERROR = "InitializationError"
    NOT_INITIALIZED = "NotInitialized"
    OPERATION_TIMEOUT = "OperationTimeout"
    OPERATION_FAILED = "OperationFailed"
    UNKNOWN = "Unknown"


# Kinds worth retrying without changing the request
TRANSIENT_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMIT_EXCEEDED,
        ErrorKind.SERVICE_UNAVAILABLE,
        ErrorKind.INTERNAL_ERROR,
        ErrorKind.OPERATION_TIMEOUT,
    }
)


@dataclass(frozen=True)
class ErrorRecord:
    """One normalized failure. Created once and never mutated."""

    kind: ErrorKind
    message: str
    context: str = ""
    http_status: Optional[int] = None
    vendor_code: Optional[str] = None
    retry_after: Optional[int] = None
    details: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def retryable(self) -> bool:
        return self.kind in TRANSIENT_KINDS

    def to_dict(self) -> dict[str, Any]:
        """Serialize the record for logs and API responses.

        ``details`` is rendered with ``repr`` since it usually holds the
        original exception object.
        """
        return {
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context,
            "http_status": self.http_status,
            "vendor_code": self.vendor_code,
            "retry_after": self.retry_after,
            "details": repr(self.details) if self.details is not None else None,
            "timestamp": self.timestamp.isoformat(),
            "retryable": self.retryable,
        }


class MarketplaceAPIError(Exception):
    """Raised for every failure surfaced by a capability module."""

    def __init__(self, record: ErrorRecord) -> None:
        super().__init__(record.message)
        self.record = record

    @property
    def kind(self) -> ErrorKind:
        return self.record.kind

    @property
    def context(self) -> str:
        return self.record.context

    @property
    def http_status(self) -> Optional[int]:
        return self.record.http_status

    @property
    def vendor_code(self) -> Optional[str]:
        return self.record.vendor_code

    @property
    def details(self) -> Any:
        return self.record.details

    def __str__(self) -> str:
        if self.record.context:
            return f"[{self.record.kind.value}] {self.record.context}: {self.record.message}"
        return f"[{self.record.kind.value}] {self.record.message}"


class HttpError(Exception):
    """Raised by request functions when the upstream returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.headers = headers or {}


class RateLimitError(HttpError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        retry_after: int = 60,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(message, status=429, body=body, headers=headers)
        self.retry_after = retry_after
