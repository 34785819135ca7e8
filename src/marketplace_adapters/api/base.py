"""Base contract for capability modules."""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Mapping, Optional, Protocol, runtime_checkable

from ..exceptions import ErrorKind
from ..utils.decorators import handle_api_errors
from ..utils.error_mapper import create_error
from ..utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

RequestOptions = dict[str, Any]


class RequestFunction(Protocol):
    """Caller-supplied boundary that performs the actual HTTP call.

    Receives ``options`` with optional ``params``, ``json`` and ``headers``
    keys. Returns an ApiResponse or a mapping with ``data``, ``status`` and
    ``headers``. Authentication and transport-level retries are its concern.
    """

    def __call__(self, method: str, path: str, options: Optional[RequestOptions] = None) -> Awaitable[Any]: ...


@dataclass
class ApiResponse:
    """Response returned by a request function."""

    data: Any = None
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "ApiResponse":
        if isinstance(raw, ApiResponse):
            return raw
        if isinstance(raw, Mapping) and "data" in raw:
            return cls(data=raw["data"], status=int(raw.get("status") or 200), headers=dict(raw.get("headers") or {}))
        if isinstance(raw, tuple) and len(raw) == 3:
            data, status, headers = raw
            return cls(data=data, status=int(status or 200), headers=dict(headers or {}))
        return cls(data=raw)

    @property
    def payload(self) -> Any:
        """SP-API v0 endpoints wrap results in ``payload``; newer ones don't."""
        if isinstance(self.data, Mapping) and "payload" in self.data:
            return self.data["payload"]
        return self.data


@dataclass(frozen=True)
class CapabilityModuleDescriptor:
    capability_name: str
    api_version: str
    marketplace_id: str


@runtime_checkable
class CapabilityModule(Protocol):
    """Uniform contract every capability module implements."""

    descriptor: CapabilityModuleDescriptor

    async def initialize(self, config: Optional[Mapping[str, Any]] = None) -> None: ...

    async def request(self, method: str, path: str, options: Optional[RequestOptions] = None) -> ApiResponse: ...


class BaseCapabilityModule(ABC):
    """Base class for capability modules routed through one request function."""

    # Capability name used for registry lookups and error contexts
    CAPABILITY: str = ""
    # Used when neither the caller nor the VersionConfig names a version
    DEFAULT_API_VERSION: str = ""

    def __init__(
        self,
        api_version: str,
        request_fn: RequestFunction,
        marketplace_id: str,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """Initialize the module.

        Args:
            api_version: API version used to build request paths
            request_fn: Boundary request function for this marketplace connection
            marketplace_id: Marketplace the module talks to
            rate_limiter: Optional limiter shared across the connection's modules
        """
        self.descriptor = CapabilityModuleDescriptor(
            capability_name=self.CAPABILITY,
            api_version=api_version,
            marketplace_id=marketplace_id,
        )
        self.request_fn = request_fn
        self.rate_limiter = rate_limiter
        self.config: dict[str, Any] = {}
        self._initialized = False

    @property
    def module_name(self) -> str:
        return self.descriptor.capability_name

    @property
    def api_version(self) -> str:
        return self.descriptor.api_version

    @property
    def marketplace_id(self) -> str:
        return self.descriptor.marketplace_id

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @abstractmethod
    def get_api_path(self) -> str:
        """Return the versioned base API path for this module."""
        pass

    async def initialize(self, config: Optional[Mapping[str, Any]] = None) -> None:
        """Prepare the module for use. Calling it again is a no-op."""
        if self._initialized:
            return
        self.config = dict(config or {})
        try:
            await self._initialize_module(self.config)
        except Exception as e:
            raise create_error(
                f"Failed to initialize {self.module_name} module: {e}",
                ErrorKind.INITIALIZATION_ERROR,
                details=e,
                context=f"{self.module_name}.initialize",
            ) from e
        self._initialized = True
        logger.info(f"Initialized {self.module_name} module (version={self.api_version})")

    async def _initialize_module(self, config: dict[str, Any]) -> None:
        """Module-specific setup, nothing by default."""

    def _require(self, condition: Any, message: str, operation: str) -> None:
        if not condition:
            raise create_error(message, ErrorKind.INVALID_INPUT, context=f"{self.module_name}.{operation}")

    async def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        data: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """Make a rate-limited request through the boundary request function.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (without base URL)
            params: Query parameters
            data: Request body data
            headers: Extra request headers

        Returns:
            ApiResponse from the request function

        Raises:
            MarketplaceAPIError: When the module has not been initialized
        """
        if not self._initialized:
            raise create_error(
                f"{self.module_name} module used before initialize()",
                ErrorKind.NOT_INITIALIZED,
                context=f"{self.module_name}.request",
            )

        request_id = str(uuid.uuid4())
        start_time = datetime.now()
        logger.info(f"Request {request_id}: Starting {method} {path}")

        if self.rate_limiter is not None:
            waited = await self.rate_limiter.wait_if_needed(self.module_name)
            if waited:
                logger.debug(f"Request {request_id}: Waited {waited:.2f}s for {self.module_name} rate limit")

        options: RequestOptions = {}
        if params:
            options["params"] = params
        if data is not None:
            options["json"] = data
        if headers:
            options["headers"] = headers

        try:
            response = ApiResponse.from_raw(await self.request_fn(method, path, options))
        except Exception as e:
            duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
            logger.error(f"Request {request_id}: Failed in {duration_ms}ms: {e}")
            raise

        duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
        logger.info(f"Request {request_id}: Success in {duration_ms}ms, status={response.status}")
        return response

    @handle_api_errors()
    async def request(self, method: str, path: str, options: Optional[RequestOptions] = None) -> ApiResponse:
        """Generic request for endpoints without a typed method."""
        options = options or {}
        return await self._make_request(
            method,
            path,
            params=options.get("params"),
            data=options.get("json"),
            headers=options.get("headers"),
        )
