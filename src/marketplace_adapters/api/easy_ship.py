"""Easy Ship capability module for Amazon SP-API."""

from typing import Any, Optional

from ..utils.decorators import handle_api_errors
from ..utils.validators import validate_amazon_order_id
from .base import ApiResponse, BaseCapabilityModule


class EasyShipModule(BaseCapabilityModule):
    """Module for scheduling Easy Ship package handovers."""

    CAPABILITY = "easyShip"
    DEFAULT_API_VERSION = "2022-03-23"

    def get_api_path(self) -> str:
        return f"/easyShip/{self.api_version}"

    @handle_api_errors()
    async def list_handover_slots(
        self,
        amazon_order_id: str,
        package_dimensions: Optional[dict[str, Any]] = None,
        package_weight: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """List the time slots available for handing over an order's package."""
        self._require(
            validate_amazon_order_id(amazon_order_id),
            f"Invalid Amazon order ID: {amazon_order_id}",
            "list_handover_slots",
        )
        body: dict[str, Any] = {"amazonOrderId": amazon_order_id, "marketplaceId": self.marketplace_id}
        if package_dimensions:
            body["packageDimensions"] = package_dimensions
        if package_weight:
            body["packageWeight"] = package_weight
        return await self._make_request("POST", f"{self.get_api_path()}/timeSlot", data=body)

    @handle_api_errors()
    async def get_scheduled_package(self, amazon_order_id: str) -> ApiResponse:
        self._require(
            validate_amazon_order_id(amazon_order_id),
            f"Invalid Amazon order ID: {amazon_order_id}",
            "get_scheduled_package",
        )
        return await self._make_request(
            "GET",
            f"{self.get_api_path()}/package",
            params={"amazonOrderId": amazon_order_id, "marketplaceId": self.marketplace_id},
        )

    @handle_api_errors()
    async def create_scheduled_package(
        self,
        amazon_order_id: str,
        package_details: dict[str, Any],
    ) -> ApiResponse:
        """Schedule a package for the slot given in ``package_details``."""
        self._require(
            validate_amazon_order_id(amazon_order_id),
            f"Invalid Amazon order ID: {amazon_order_id}",
            "create_scheduled_package",
        )
        self._require(package_details, "Package details are required to schedule a package", "create_scheduled_package")
        return await self._make_request(
            "POST",
            f"{self.get_api_path()}/package",
            data={
                "amazonOrderId": amazon_order_id,
                "marketplaceId": self.marketplace_id,
                "packageDetails": package_details,
            },
        )

    @handle_api_errors()
    async def update_scheduled_packages(self, update_package_details: list[dict[str, Any]]) -> ApiResponse:
        self._require(
            update_package_details,
            "At least one package update is required",
            "update_scheduled_packages",
        )
        return await self._make_request(
            "PATCH",
            f"{self.get_api_path()}/package",
            data={"marketplaceId": self.marketplace_id, "updatePackageDetailsList": update_package_details},
        )
