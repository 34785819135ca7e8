"""Capability modules for marketplace APIs."""

from .application_integrations import ApplicationIntegrationsModule
from .authorization import AuthorizationModule
from .base import ApiResponse, BaseCapabilityModule, CapabilityModule, CapabilityModuleDescriptor, RequestFunction
from .brand_protection import BrandProtectionModule
from .easy_ship import EasyShipModule
from .orders import OrdersModule
from .product_type_definitions import ProductTypeDefinitionsModule
from .registry import MODULE_FACTORIES, ModuleRegistry, create_module, resolve_api_version
from .vendors import VendorsModule

__all__ = [
    "MODULE_FACTORIES",
    "ApiResponse",
    "ApplicationIntegrationsModule",
    "AuthorizationModule",
    "BaseCapabilityModule",
    "BrandProtectionModule",
    "CapabilityModule",
    "CapabilityModuleDescriptor",
    "EasyShipModule",
    "ModuleRegistry",
    "OrdersModule",
    "ProductTypeDefinitionsModule",
    "RequestFunction",
    "VendorsModule",
    "create_module",
    "resolve_api_version",
]
