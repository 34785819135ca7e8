"""Orders capability module for Amazon SP-API."""

import logging
from typing import Any, Optional

from ..config import BatchConfig
from ..utils.batch import BatchExecutor, BatchOutcome
from ..utils.decorators import handle_api_errors
from ..utils.pagination import Page, PaginationCursor, collect_all
from ..utils.validators import validate_iso8601_date, validate_page_size
from .base import ApiResponse, BaseCapabilityModule

logger = logging.getLogger(__name__)

# getOrders accepts at most 50 AmazonOrderIds per call
MAX_ORDER_IDS_PER_REQUEST = 50


class OrdersModule(BaseCapabilityModule):
    """Module for Amazon SP-API Orders endpoints."""

    CAPABILITY = "orders"
    DEFAULT_API_VERSION = "v0"

    def get_api_path(self) -> str:
        """Return the base API path for Orders endpoints."""
        return f"/orders/{self.api_version}"

    @handle_api_errors()
    async def get_orders(
        self,
        created_after: Optional[str] = None,
        created_before: Optional[str] = None,
        order_statuses: Optional[list[str]] = None,
        amazon_order_ids: Optional[list[str]] = None,
        max_results: int = 100,
        next_token: Optional[str] = None,
    ) -> ApiResponse:
        """
        Retrieve one page of orders.

        Args:
            created_after: ISO 8601 date string for orders created after this date
            created_before: Optional ISO 8601 date string for orders created before this date
            order_statuses: Optional list of order statuses to filter by
            amazon_order_ids: Optional list of order IDs (at most 50)
            max_results: Page size requested from the API
            next_token: Continuation token from a previous page

        Returns:
            ApiResponse whose payload holds ``Orders`` and ``NextToken``
        """
        self._require(
            created_after or amazon_order_ids or next_token,
            "created_after or amazon_order_ids is required",
            "get_orders",
        )
        if created_after:
            self._require(
                validate_iso8601_date(created_after), f"Invalid created_after date: {created_after}", "get_orders"
            )
        if amazon_order_ids:
            self._require(
                len(amazon_order_ids) <= MAX_ORDER_IDS_PER_REQUEST,
                f"At most {MAX_ORDER_IDS_PER_REQUEST} order IDs are allowed per request",
                "get_orders",
            )
        self._require(validate_page_size(max_results), f"Invalid max_results: {max_results}", "get_orders")

        params: dict[str, Any] = {"MarketplaceIds": self.marketplace_id, "MaxResultsPerPage": max_results}
        if created_after:
            params["CreatedAfter"] = created_after
        if created_before:
            params["CreatedBefore"] = created_before
        if order_statuses:
            params["OrderStatuses"] = ",".join(order_statuses)
        if amazon_order_ids:
            params["AmazonOrderIds"] = ",".join(amazon_order_ids)
        if next_token:
            params["NextToken"] = next_token

        return await self._make_request("GET", f"{self.get_api_path()}/orders", params=params)

    @handle_api_errors()
    async def get_order(self, order_id: str) -> ApiResponse:
        """
        Retrieve details for a single order.

        Args:
            order_id: Amazon Order ID

        Returns:
            ApiResponse with the order payload
        """
        self._require(order_id, "Order ID is required to get order details", "get_order")
        return await self._make_request("GET", f"{self.get_api_path()}/orders/{order_id}")

    @handle_api_errors()
    async def get_order_items(self, order_id: str, next_token: Optional[str] = None) -> ApiResponse:
        """
        Retrieve order items for a specific order.

        This endpoint has strict rate limits: 0.5 requests/second with burst of 30.
        """
        self._require(order_id, "Order ID is required to get order items", "get_order_items")
        params = {"NextToken": next_token} if next_token else None
        return await self._make_request("GET", f"{self.get_api_path()}/orders/{order_id}/orderItems", params=params)

    @handle_api_errors()
    async def get_all_orders(
        self,
        created_after: str,
        created_before: Optional[str] = None,
        order_statuses: Optional[list[str]] = None,
        max_pages: int = 10,
    ) -> list[dict[str, Any]]:
        """Follow ``NextToken`` across pages, up to ``max_pages`` calls."""

        async def fetch_page(cursor: PaginationCursor) -> Page:
            response = await self.get_orders(
                created_after=created_after,
                created_before=created_before,
                order_statuses=order_statuses,
                next_token=cursor,
            )
            payload = response.payload or {}
            return Page(payload.get("Orders", []), payload.get("NextToken"))

        return await collect_all(fetch_page, max_pages=max_pages)

    async def get_orders_by_ids(
        self,
        order_ids: list[str],
        config: Optional[BatchConfig] = None,
        executor: Optional[BatchExecutor] = None,
    ) -> BatchOutcome:
        """Look up many orders, one ``getOrders`` call per batch of IDs.

        Each batch result is the list of orders returned for that batch.
        Failed batches are reported in the outcome's errors, not raised.
        """
        self._require(order_ids, "At least one order ID is required", "get_orders_by_ids")
        executor = executor or BatchExecutor()

        async def fetch_batch(batch: list[str]) -> list[dict[str, Any]]:
            response = await self.get_orders(amazon_order_ids=batch, max_results=len(batch))
            return (response.payload or {}).get("Orders", [])

        config = config or BatchConfig()
        self._require(
            config.batch_size <= MAX_ORDER_IDS_PER_REQUEST,
            f"batch_size cannot exceed {MAX_ORDER_IDS_PER_REQUEST} for order lookups",
            "get_orders_by_ids",
        )
        outcome = await executor.run_with_config(order_ids, fetch_batch, config)
        logger.info(f"Fetched orders for {len(order_ids)} IDs, {len(outcome.errors)} batches failed")
        return outcome
