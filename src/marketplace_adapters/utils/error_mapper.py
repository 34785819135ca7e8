"""Normalization of raw HTTP and vendor errors into ``ErrorKind`` values.

Classification is heuristic. The upstream error code and message are
lower-cased and checked against an ordered rule list where the first match
wins, so an ambiguous error (a 404 that mentions "quota") always lands on
the same kind.

Two entry points exist and they intentionally disagree on one case:
``map_to_error_kind`` classifies a bare 400 as ``InvalidInput`` while the
pure status route of ``map_http_error`` reports ``InvalidRequest``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

import requests

from ..exceptions import ErrorKind, ErrorRecord, HttpError, MarketplaceAPIError, RateLimitError

logger = logging.getLogger(__name__)

# Scanned in this order when refining a not-found error
_NOT_FOUND_REFINEMENTS = (
    ("asin", ErrorKind.ASIN_NOT_FOUND),
    ("order", ErrorKind.ORDER_NOT_FOUND),
    ("sku", ErrorKind.SKU_NOT_FOUND),
    ("product", ErrorKind.PRODUCT_NOT_FOUND),
)


@dataclass(frozen=True)
class StructuredRawError:
    """Upstream payload carried an ``errors`` list."""

    entries: list[dict[str, Any]]
    status: Optional[int] = None


@dataclass(frozen=True)
class HttpStatusRawError:
    """Upstream failure with only a status code (and maybe an opaque body)."""

    status: Optional[int]
    body: Any = None
    message: str = ""
    headers: dict[str, str] = field(default_factory=dict)


RawError = Union[StructuredRawError, HttpStatusRawError]


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def _refine_not_found(message: str) -> ErrorKind:
    for needle, kind in _NOT_FOUND_REFINEMENTS:
        if needle in message:
            return kind
    return ErrorKind.RESOURCE_NOT_FOUND


def map_to_error_kind(raw: Any) -> ErrorKind:
    """Classify a single upstream error.

    Args:
        raw: Mapping or object exposing ``code``, ``message`` and/or ``status``

    Returns:
        The matching ErrorKind, ``ErrorKind.UNKNOWN`` when nothing matches
    """
    code_value = _field(raw, "code")
    if code_value is None:
        code_value = _field(raw, "status")
    code = str(code_value).lower() if code_value is not None else ""
    message = str(_field(raw, "message") or "").lower()
    text = f"{code} {message}"

    if "throttl" in text or "ratelimit" in text or "rate limit" in text or code == "429":
        return ErrorKind.RATE_LIMIT_EXCEEDED
    if "quota" in text:
        return ErrorKind.QUOTA_EXCEEDED
    if "auth" in text or "token" in text or code == "401":
        return ErrorKind.UNAUTHORIZED
    if "not_found" in text or "notfound" in text or "not found" in text or code == "404":
        return _refine_not_found(message)
    if "invalid" in text or code == "400":
        return ErrorKind.INVALID_INPUT
    if "service" in text or code in ("500", "502", "503"):
        return ErrorKind.SERVICE_UNAVAILABLE
    if "internal" in text:
        return ErrorKind.INTERNAL_ERROR
    return ErrorKind.UNKNOWN


def _extract_entries(body: Any) -> list[dict[str, Any]]:
    if isinstance(body, Mapping):
        errors = body.get("errors")
        if isinstance(errors, list):
            return [entry for entry in errors if isinstance(entry, Mapping)]
    return []


def to_raw_error(error: Any) -> RawError:
    """Reduce whatever a request function raised to a ``RawError``."""
    status: Optional[int] = None
    body: Any = None
    headers: dict[str, str] = {}
    message = str(error)

    if isinstance(error, HttpError):
        status, body, headers = error.status, error.body, dict(error.headers)
    elif isinstance(error, requests.HTTPError) and error.response is not None:
        status = error.response.status_code
        headers = dict(error.response.headers)
        try:
            body = error.response.json()
        except ValueError:
            body = error.response.text
    elif isinstance(error, Mapping):
        status = error.get("status")
        body = error.get("data", error.get("body", error))
        message = str(error.get("message") or "")
    else:
        status = getattr(error, "status", None)

    entries = _extract_entries(body)
    if entries:
        return StructuredRawError(entries=entries, status=status)
    if isinstance(body, Mapping) and body.get("message"):
        message = str(body["message"])
    return HttpStatusRawError(status=status, body=body, message=message, headers=headers)


def _kind_for_status(raw: HttpStatusRawError) -> ErrorKind:
    status = raw.status
    message = raw.message.lower()
    if status == 429:
        return ErrorKind.RATE_LIMIT_EXCEEDED
    if status in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status == 404:
        return _refine_not_found(message)
    if status == 400:
        return ErrorKind.INVALID_REQUEST
    if status in (500, 502, 503):
        return ErrorKind.SERVICE_UNAVAILABLE
    if status == 504:
        return ErrorKind.OPERATION_TIMEOUT
    return map_to_error_kind({"code": status, "message": raw.message})


def _retry_after(error: Any, headers: Mapping[str, str]) -> Optional[int]:
    if isinstance(error, RateLimitError):
        return error.retry_after
    value = headers.get("Retry-After") or headers.get("retry-after")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def map_http_error(error: Any, context: str) -> MarketplaceAPIError:
    """Turn anything raised while calling an upstream API into a MarketplaceAPIError.

    Errors that are already mapped are returned untouched so the innermost
    context survives re-raising through several layers. Structured error
    lists take precedence over status code heuristics. This function never
    raises.

    Args:
        error: The exception (or raw mapping) to normalize
        context: ``{module}.{operation}`` identifying where the failure happened

    Returns:
        MarketplaceAPIError carrying an immutable ErrorRecord
    """
    if isinstance(error, MarketplaceAPIError):
        return error

    if isinstance(error, (asyncio.TimeoutError, requests.Timeout)):
        record = ErrorRecord(
            kind=ErrorKind.OPERATION_TIMEOUT,
            message=str(error) or "Operation timed out",
            context=context,
            details=error,
        )
        logger.debug(f"Mapped timeout in {context} to {record.kind.value}")
        return MarketplaceAPIError(record)

    raw = to_raw_error(error)
    if isinstance(raw, StructuredRawError):
        first = raw.entries[0]
        kind = map_to_error_kind(first)
        message = str(first.get("message") or first.get("code") or "Upstream API error")
        vendor_code = first.get("code")
        headers: Mapping[str, str] = {}
    else:
        kind = _kind_for_status(raw) if raw.status is not None else map_to_error_kind({"message": raw.message})
        message = raw.message or f"Upstream API returned status {raw.status}"
        vendor_code = None
        headers = raw.headers

    record = ErrorRecord(
        kind=kind,
        message=message,
        context=context,
        http_status=raw.status,
        vendor_code=str(vendor_code) if vendor_code is not None else None,
        retry_after=_retry_after(error, headers),
        details=error,
    )
    logger.debug(f"Mapped error in {context} to {kind.value} (status={raw.status})")
    return MarketplaceAPIError(record)


def create_error(
    message: str,
    kind: ErrorKind,
    details: Any = None,
    context: str = "",
) -> MarketplaceAPIError:
    """Build an error directly from a kind, e.g. for argument validation."""
    return MarketplaceAPIError(ErrorRecord(kind=kind, message=message, context=context, details=details))
