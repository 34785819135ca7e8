"""Capability module registry and factories.

One registry exists per marketplace connection. It owns the module
instances; callers only borrow them through ``get``. Modules are registered
while the connection is being set up and looked up afterwards, so lookups
need no locking.
"""

import logging
from typing import Any, Mapping, Optional

from ..config import VersionConfig
from ..constants import SP_API_MODULES
from ..exceptions import ErrorKind
from ..utils.error_mapper import create_error
from ..utils.rate_limiter import RateLimiter
from ..utils.validators import validate_api_version, validate_capability_name
from .application_integrations import ApplicationIntegrationsModule
from .authorization import AuthorizationModule
from .base import BaseCapabilityModule, CapabilityModule, RequestFunction
from .brand_protection import BrandProtectionModule
from .easy_ship import EasyShipModule
from .orders import OrdersModule
from .product_type_definitions import ProductTypeDefinitionsModule
from .vendors import VendorsModule

logger = logging.getLogger(__name__)

MODULE_FACTORIES: dict[str, type[BaseCapabilityModule]] = {
    module.CAPABILITY: module
    for module in (
        ApplicationIntegrationsModule,
        AuthorizationModule,
        BrandProtectionModule,
        EasyShipModule,
        OrdersModule,
        ProductTypeDefinitionsModule,
        VendorsModule,
    )
}


def resolve_api_version(
    capability: str,
    explicit_version: Optional[str] = None,
    version_config: Optional[VersionConfig] = None,
    fallback: Optional[str] = None,
) -> str:
    """Pick the API version: explicit, then configured default, then hardcoded.

    Versions missing from the capability's known versions are allowed but logged.

    Raises:
        MarketplaceAPIError: InvalidInput when no tier yields a version, or
            the chosen version is malformed
    """
    version = explicit_version
    if not version and version_config is not None:
        version = version_config.default_for(capability)
    if not version:
        version = fallback

    if not version:
        raise create_error(
            f"No API version available for {capability}",
            ErrorKind.INVALID_INPUT,
            context=f"{capability}.create",
        )
    if not validate_api_version(version):
        raise create_error(
            f"Invalid API version {version!r} for {capability}",
            ErrorKind.INVALID_INPUT,
            context=f"{capability}.create",
        )

    known_versions = SP_API_MODULES.get(capability, {}).get("versions", ())
    if known_versions and version not in known_versions:
        logger.warning(f"API version {version} of {capability} is not one of the known versions {list(known_versions)}")
    return version


def create_module(
    capability: str,
    request_fn: RequestFunction,
    marketplace_id: str,
    api_version: Optional[str] = None,
    version_config: Optional[VersionConfig] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> BaseCapabilityModule:
    """Construct the module for ``capability`` with a negotiated API version."""
    module_class = MODULE_FACTORIES.get(capability)
    if module_class is None:
        raise create_error(
            f"Unknown capability: {capability}",
            ErrorKind.INVALID_INPUT,
            context=f"{capability}.create",
        )
    version = resolve_api_version(capability, api_version, version_config, module_class.DEFAULT_API_VERSION)
    return module_class(version, request_fn, marketplace_id, rate_limiter=rate_limiter)


class ModuleRegistry:
    """Capability name to module mapping for one marketplace connection."""

    def __init__(
        self,
        request_fn: RequestFunction,
        marketplace_id: str,
        version_config: Optional[VersionConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """Initialize the registry.

        Args:
            request_fn: Boundary request function shared by created modules
            marketplace_id: Marketplace of this connection
            version_config: Default API versions, module definitions when omitted
            rate_limiter: Limiter shared by created modules, a fresh one when omitted
        """
        self.request_fn = request_fn
        self.marketplace_id = marketplace_id
        self.version_config = version_config or VersionConfig.from_module_definitions()
        self.rate_limiter = rate_limiter or RateLimiter()
        self._modules: dict[str, CapabilityModule] = {}

    def register(self, capability: str, module: CapabilityModule) -> None:
        """Register ``module`` under ``capability``. A later registration replaces an earlier one."""
        if not validate_capability_name(capability):
            raise create_error(
                f"Invalid capability name: {capability!r}",
                ErrorKind.INVALID_INPUT,
                context="registry.register",
            )
        if capability in self._modules and self._modules[capability] is not module:
            logger.info(f"Replacing registered module for {capability}")
        self._modules[capability] = module

    def get(self, capability: str) -> CapabilityModule:
        """Return the registered module.

        Raises:
            MarketplaceAPIError: NotInitialized when nothing is registered under ``capability``
        """
        try:
            return self._modules[capability]
        except KeyError:
            raise create_error(
                f"No module registered for capability {capability!r}",
                ErrorKind.NOT_INITIALIZED,
                context="registry.get",
            ) from None

    async def get_or_create(
        self,
        capability: str,
        api_version: Optional[str] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> CapabilityModule:
        """Return the registered module, creating and initializing it first if needed."""
        if capability in self._modules:
            return self._modules[capability]

        module = create_module(
            capability,
            self.request_fn,
            self.marketplace_id,
            api_version=api_version,
            version_config=self.version_config,
            rate_limiter=self.rate_limiter,
        )
        await module.initialize(config)
        self.register(capability, module)
        return module

    def __contains__(self, capability: object) -> bool:
        return capability in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def capabilities(self) -> list[str]:
        return sorted(self._modules)

    def close(self) -> None:
        """Drop every module when the connection context ends."""
        logger.info(f"Closing registry for marketplace {self.marketplace_id} ({len(self._modules)} modules)")
        self._modules.clear()
