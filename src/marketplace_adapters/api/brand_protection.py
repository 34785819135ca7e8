"""Brand protection capability module.

Thin transport for brand registry cases. Case workflows (escalation,
evidence rules) belong to callers.
"""

from typing import Any, Optional

from ..utils.decorators import handle_api_errors
from ..utils.pagination import Page, PaginationCursor, collect_all
from .base import ApiResponse, BaseCapabilityModule


class BrandProtectionModule(BaseCapabilityModule):
    """Module for brand protection case endpoints."""

    CAPABILITY = "brandProtection"
    DEFAULT_API_VERSION = "v1"

    def get_api_path(self) -> str:
        return f"/brandProtection/{self.api_version}"

    @handle_api_errors()
    async def search_cases(
        self,
        criteria: Optional[dict[str, Any]] = None,
        next_token: Optional[str] = None,
    ) -> ApiResponse:
        body: dict[str, Any] = {"marketplaceId": self.marketplace_id, **(criteria or {})}
        if next_token:
            body["nextToken"] = next_token
        return await self._make_request("POST", f"{self.get_api_path()}/cases/search", data=body)

    @handle_api_errors()
    async def get_case(self, case_id: str) -> ApiResponse:
        self._require(case_id, "Case ID is required", "get_case")
        return await self._make_request("GET", f"{self.get_api_path()}/cases/{case_id}")

    @handle_api_errors()
    async def create_case(self, case: dict[str, Any]) -> ApiResponse:
        self._require(case, "Case details are required", "create_case")
        return await self._make_request(
            "POST", f"{self.get_api_path()}/cases", data={"marketplaceId": self.marketplace_id, **case}
        )

    @handle_api_errors()
    async def get_all_cases(
        self,
        criteria: Optional[dict[str, Any]] = None,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        async def fetch_page(cursor: PaginationCursor) -> Page:
            response = await self.search_cases(criteria, next_token=cursor)
            data = response.data or {}
            return Page(data.get("cases", []), data.get("nextToken"))

        return await collect_all(fetch_page, max_pages=max_pages)

    async def get_cases_by_asin(self, asin: str, max_pages: int = 10) -> list[dict[str, Any]]:
        self._require(asin, "ASIN is required", "get_cases_by_asin")
        return await self.get_all_cases({"asin": asin}, max_pages=max_pages)
