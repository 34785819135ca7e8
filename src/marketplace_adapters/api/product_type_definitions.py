"""Product Type Definitions capability module for Amazon SP-API."""

from typing import Any, Optional

from ..utils.decorators import handle_api_errors
from ..utils.pagination import Page, PaginationCursor, collect_all
from .base import ApiResponse, BaseCapabilityModule


class ProductTypeDefinitionsModule(BaseCapabilityModule):
    """Module for looking up product types and their JSON schemas."""

    CAPABILITY = "productTypeDefinitions"
    DEFAULT_API_VERSION = "2020-09-01"

    def get_api_path(self) -> str:
        return f"/definitions/{self.api_version}"

    @handle_api_errors()
    async def search_product_types(
        self,
        keywords: Optional[list[str]] = None,
        item_name: Optional[str] = None,
        page_token: Optional[str] = None,
    ) -> ApiResponse:
        """Search product types by keywords or item name."""
        params: dict[str, Any] = {"marketplaceIds": self.marketplace_id}
        if keywords:
            params["keywords"] = ",".join(keywords)
        if item_name:
            params["itemName"] = item_name
        if page_token:
            params["pageToken"] = page_token
        return await self._make_request("GET", f"{self.get_api_path()}/productTypes", params=params)

    @handle_api_errors()
    async def get_product_type(
        self,
        product_type: str,
        requirements: str = "LISTING",
        locale: Optional[str] = None,
    ) -> ApiResponse:
        """Get the definition (schema links and property groups) of one product type."""
        self._require(product_type, "Product type is required", "get_product_type")
        params: dict[str, Any] = {"marketplaceIds": self.marketplace_id, "requirements": requirements}
        if locale:
            params["locale"] = locale
        return await self._make_request("GET", f"{self.get_api_path()}/productTypes/{product_type}", params=params)

    @handle_api_errors()
    async def get_all_product_types(
        self,
        keywords: Optional[list[str]] = None,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        async def fetch_page(cursor: PaginationCursor) -> Page:
            response = await self.search_product_types(keywords=keywords, page_token=cursor)
            data = response.data or {}
            return Page(data.get("productTypes", []), data.get("nextPageToken"))

        return await collect_all(fetch_page, max_pages=max_pages)

    async def get_property_groups(self, product_type: str) -> dict[str, Any]:
        response = await self.get_product_type(product_type)
        return (response.data or {}).get("propertyGroups", {})
