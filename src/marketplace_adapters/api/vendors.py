"""Vendor capability module for Amazon SP-API.

Covers the vendor (first-party supplier) purchase order endpoints. The
module only moves data; acceptance rules for acknowledgements are left to
callers.
"""

import logging
from typing import Any, Optional

from ..utils.decorators import handle_api_errors
from ..utils.pagination import Page, PaginationCursor, collect_all
from ..utils.validators import validate_page_size
from .base import ApiResponse, BaseCapabilityModule

logger = logging.getLogger(__name__)


class VendorsModule(BaseCapabilityModule):
    """Module for Amazon SP-API Vendor Orders endpoints."""

    CAPABILITY = "vendors"
    DEFAULT_API_VERSION = "v1"

    def get_api_path(self) -> str:
        return f"/vendor/orders/{self.api_version}"

    @handle_api_errors()
    async def get_orders(
        self,
        created_after: Optional[str] = None,
        created_before: Optional[str] = None,
        order_state: Optional[str] = None,
        limit: Optional[int] = None,
        next_token: Optional[str] = None,
    ) -> ApiResponse:
        """Get one page of purchase orders.

        Args:
            created_after: Earliest purchase date (ISO 8601)
            created_before: Latest purchase date (ISO 8601)
            order_state: Filter by purchase order state (New, Acknowledged, Closed)
            limit: Maximum number of orders in the page
            next_token: Continuation token from a previous page

        Returns:
            ApiResponse whose payload holds ``orders`` and ``pagination``
        """
        if limit is not None:
            self._require(validate_page_size(limit), f"limit must be between 1 and 100: {limit}", "get_orders")
        params: dict[str, Any] = {}
        if created_after:
            params["createdAfter"] = created_after
        if created_before:
            params["createdBefore"] = created_before
        if order_state:
            params["purchaseOrderState"] = order_state
        if limit:
            params["limit"] = limit
        if next_token:
            params["nextToken"] = next_token

        return await self._make_request("GET", f"{self.get_api_path()}/purchaseOrders", params=params)

    @handle_api_errors()
    async def get_order(self, purchase_order_number: str) -> ApiResponse:
        self._require(purchase_order_number, "Order number is required to get order details", "get_order")
        return await self._make_request("GET", f"{self.get_api_path()}/purchaseOrders/{purchase_order_number}")

    @handle_api_errors()
    async def submit_acknowledgement(self, acknowledgements: list[dict[str, Any]]) -> ApiResponse:
        """Submit purchase order acknowledgements as given by the caller."""
        self._require(acknowledgements, "At least one acknowledgement is required", "submit_acknowledgement")
        return await self._make_request(
            "POST",
            f"{self.get_api_path()}/acknowledgements",
            data={"acknowledgements": acknowledgements},
        )

    @handle_api_errors()
    async def get_transaction_status(self, transaction_id: str) -> ApiResponse:
        self._require(transaction_id, "Transaction ID is required to get transaction status", "get_transaction_status")
        return await self._make_request("GET", f"/vendor/transactions/{self.api_version}/transactions/{transaction_id}")

    @handle_api_errors()
    async def get_all_orders(
        self,
        created_after: str,
        created_before: str,
        limit: int = 100,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        """All purchase orders in a date range, at most ``max_pages`` requests."""

        async def fetch_page(cursor: PaginationCursor) -> Page:
            response = await self.get_orders(
                created_after=created_after,
                created_before=created_before,
                limit=limit,
                next_token=cursor,
            )
            payload = response.payload or {}
            return Page(payload.get("orders", []), (payload.get("pagination") or {}).get("nextToken"))

        orders = await collect_all(fetch_page, max_pages=max_pages)
        logger.info(f"Retrieved {len(orders)} vendor purchase orders")
        return orders
