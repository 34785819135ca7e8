"""Tests for capability modules."""

from unittest.mock import AsyncMock

import pytest

from marketplace_adapters.api.application_integrations import ApplicationIntegrationsModule
from marketplace_adapters.api.authorization import AuthorizationModule
from marketplace_adapters.api.base import ApiResponse
from marketplace_adapters.api.brand_protection import BrandProtectionModule
from marketplace_adapters.api.easy_ship import EasyShipModule
from marketplace_adapters.api.orders import OrdersModule
from marketplace_adapters.api.product_type_definitions import ProductTypeDefinitionsModule
from marketplace_adapters.api.vendors import VendorsModule
from marketplace_adapters.config import BatchConfig
from marketplace_adapters.exceptions import ErrorKind, HttpError, MarketplaceAPIError
from marketplace_adapters.utils.batch import BatchExecutor

MARKETPLACE_ID = "A1F83G8C2ARO7P"


async def make_module(module_class, request_fn, api_version=None, **kwargs):
    module = module_class(api_version or module_class.DEFAULT_API_VERSION, request_fn, MARKETPLACE_ID, **kwargs)
    await module.initialize()
    return module


class TestBaseCapabilityModule:
    """Test behaviour shared by every module."""

    @pytest.mark.asyncio
    async def test_request_before_initialize(self, stub_request):
        module = VendorsModule("v1", stub_request, MARKETPLACE_ID)

        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.request("GET", "/vendor/orders/v1/purchaseOrders")

        assert exc_info.value.kind == ErrorKind.NOT_INITIALIZED
        assert stub_request.calls == []

    @pytest.mark.asyncio
    async def test_generic_request(self, stub_request):
        stub_request.responses.append({"data": {"ok": True}, "status": 200, "headers": {"x-amzn-RequestId": "1"}})
        module = await make_module(VendorsModule, stub_request)

        response = await module.request("GET", "/custom/path", {"params": {"a": 1}})

        assert response.data == {"ok": True}
        assert response.headers == {"x-amzn-RequestId": "1"}
        assert stub_request.calls == [("GET", "/custom/path", {"params": {"a": 1}})]

    @pytest.mark.asyncio
    async def test_tuple_response(self, stub_request):
        stub_request.responses.append(({"payload": {"orders": []}}, 202, {"x-amzn-RequestId": "2"}))
        module = await make_module(VendorsModule, stub_request)

        response = await module.request("POST", "/custom/path")

        assert response.status == 202
        assert response.payload == {"orders": []}
        assert response.headers == {"x-amzn-RequestId": "2"}

    @pytest.mark.asyncio
    async def test_missing_status_defaults_to_ok(self, stub_request):
        stub_request.responses.extend(
            [
                {"data": {"a": 1}, "status": None, "headers": None},
                ({"b": 2}, None, None),
            ]
        )
        module = await make_module(VendorsModule, stub_request)

        first = await module.request("GET", "/custom/path")
        second = await module.request("GET", "/custom/path")

        assert (first.data, first.status, first.headers) == ({"a": 1}, 200, {})
        assert (second.data, second.status, second.headers) == ({"b": 2}, 200, {})

    @pytest.mark.asyncio
    async def test_request_errors_carry_context(self, stub_request):
        stub_request.responses.append(HttpError("Request failed with status 503", status=503))
        module = await make_module(VendorsModule, stub_request)

        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.request("GET", "/custom/path")

        assert exc_info.value.kind == ErrorKind.SERVICE_UNAVAILABLE
        assert exc_info.value.context == "vendors.request"

    @pytest.mark.asyncio
    async def test_typed_method_errors_carry_method_context(self, stub_request):
        stub_request.responses.append(
            HttpError("x", status=404, body={"errors": [{"code": "NotFound", "message": "Order not found"}]})
        )
        module = await make_module(OrdersModule, stub_request)

        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.get_order("123-1234567-1234567")

        assert exc_info.value.kind == ErrorKind.ORDER_NOT_FOUND
        assert exc_info.value.context == "orders.get_order"

    @pytest.mark.asyncio
    async def test_missing_argument_is_invalid_input(self, stub_request):
        module = await make_module(OrdersModule, stub_request)

        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.get_order("")

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert exc_info.value.context == "orders.get_order"
        assert stub_request.calls == []

    @pytest.mark.asyncio
    async def test_initialize_failure(self, stub_request, monkeypatch):
        module = EasyShipModule("2022-03-23", stub_request, MARKETPLACE_ID)
        monkeypatch.setattr(module, "_initialize_module", AsyncMock(side_effect=RuntimeError("no config")))

        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.initialize({"x": 1})

        assert exc_info.value.kind == ErrorKind.INITIALIZATION_ERROR
        assert exc_info.value.context == "easyShip.initialize"
        assert module.is_initialized is False

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, stub_request):
        module = await make_module(EasyShipModule, stub_request)
        await module.initialize({"ignored": True})
        assert module.config == {}

    @pytest.mark.asyncio
    async def test_rate_limiter_is_consulted(self, stub_request):
        limiter = AsyncMock()
        limiter.wait_if_needed.return_value = 0.0
        module = await make_module(EasyShipModule, stub_request, rate_limiter=limiter)

        await module.get_scheduled_package("123-1234567-1234567")

        limiter.wait_if_needed.assert_awaited_once_with("easyShip")


class TestOrdersModule:
    """Test the orders module."""

    @pytest.mark.asyncio
    async def test_get_orders_params(self, stub_request):
        module = await make_module(OrdersModule, stub_request)

        await module.get_orders(created_after="2024-01-01T00:00:00Z", order_statuses=["Shipped", "Unshipped"])

        method, path, options = stub_request.calls[0]
        assert (method, path) == ("GET", "/orders/v0/orders")
        assert options["params"]["CreatedAfter"] == "2024-01-01T00:00:00Z"
        assert options["params"]["OrderStatuses"] == "Shipped,Unshipped"
        assert options["params"]["MarketplaceIds"] == MARKETPLACE_ID

    @pytest.mark.asyncio
    async def test_get_orders_rejects_bad_date(self, stub_request):
        module = await make_module(OrdersModule, stub_request)
        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.get_orders(created_after="yesterday")
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_get_all_orders_follows_next_token(self, stub_request):
        stub_request.responses.extend(
            [
                ApiResponse(data={"payload": {"Orders": [{"AmazonOrderId": "1"}], "NextToken": "abc"}}),
                ApiResponse(data={"payload": {"Orders": [{"AmazonOrderId": "2"}]}}),
            ]
        )
        module = await make_module(OrdersModule, stub_request)

        orders = await module.get_all_orders("2024-01-01T00:00:00Z")

        assert [order["AmazonOrderId"] for order in orders] == ["1", "2"]
        assert "NextToken" not in stub_request.calls[0][2]["params"]
        assert stub_request.calls[1][2]["params"]["NextToken"] == "abc"

    @pytest.mark.asyncio
    async def test_get_orders_by_ids_batches(self, stub_request, fake_sleep):
        stub_request.responses.extend(
            [
                ApiResponse(data={"payload": {"Orders": [{"AmazonOrderId": "a"}, {"AmazonOrderId": "b"}]}}),
                HttpError("Request failed with status 400", status=400),
                ApiResponse(data={"payload": {"Orders": [{"AmazonOrderId": "e"}]}}),
            ]
        )
        module = await make_module(OrdersModule, stub_request)
        config = BatchConfig(batch_size=2, max_retries=0)

        outcome = await module.get_orders_by_ids(
            ["a", "b", "c", "d", "e"], config=config, executor=BatchExecutor(sleep=fake_sleep)
        )

        assert outcome.results == [[{"AmazonOrderId": "a"}, {"AmazonOrderId": "b"}], [{"AmazonOrderId": "e"}]]
        assert outcome.failed_batch_indexes == [1]
        assert outcome.errors[0].error.kind == ErrorKind.INVALID_REQUEST
        assert outcome.errors[0].error.context == "orders.get_orders"
        assert stub_request.calls[1][2]["params"]["AmazonOrderIds"] == "c,d"

    @pytest.mark.asyncio
    async def test_get_orders_by_ids_rejects_large_batches(self, stub_request):
        module = await make_module(OrdersModule, stub_request)
        with pytest.raises(MarketplaceAPIError):
            await module.get_orders_by_ids(["a"], config=BatchConfig(batch_size=51))


class TestVendorsModule:
    """Test the vendors module."""

    @pytest.mark.asyncio
    async def test_get_all_orders_pagination(self, stub_request):
        stub_request.responses.extend(
            [
                ApiResponse(
                    data={"payload": {"orders": [{"purchaseOrderNumber": "P1"}], "pagination": {"nextToken": "n"}}}
                ),
                ApiResponse(data={"payload": {"orders": [{"purchaseOrderNumber": "P2"}], "pagination": {}}}),
            ]
        )
        module = await make_module(VendorsModule, stub_request)

        orders = await module.get_all_orders("2024-01-01", "2024-02-01")

        assert [order["purchaseOrderNumber"] for order in orders] == ["P1", "P2"]
        assert stub_request.calls[0][1] == "/vendor/orders/v1/purchaseOrders"
        assert stub_request.calls[1][2]["params"]["nextToken"] == "n"

    @pytest.mark.asyncio
    async def test_get_all_orders_respects_page_cap(self, stub_request):
        stub_request.responses.extend(
            ApiResponse(data={"payload": {"orders": [{"n": i}], "pagination": {"nextToken": "again"}}})
            for i in range(5)
        )
        module = await make_module(VendorsModule, stub_request)

        orders = await module.get_all_orders("2024-01-01", "2024-02-01", max_pages=3)

        assert len(orders) == 3
        assert len(stub_request.calls) == 3

    @pytest.mark.asyncio
    async def test_submit_acknowledgement(self, stub_request):
        module = await make_module(VendorsModule, stub_request)
        await module.submit_acknowledgement([{"purchaseOrderNumber": "P1"}])

        method, path, options = stub_request.calls[0]
        assert (method, path) == ("POST", "/vendor/orders/v1/acknowledgements")
        assert options["json"] == {"acknowledgements": [{"purchaseOrderNumber": "P1"}]}

    @pytest.mark.asyncio
    async def test_transaction_status_path(self, stub_request):
        module = await make_module(VendorsModule, stub_request)
        await module.get_transaction_status("tx-1")
        assert stub_request.calls[0][1] == "/vendor/transactions/v1/transactions/tx-1"


class TestOtherModules:
    """Test request shapes of the remaining modules."""

    @pytest.mark.asyncio
    async def test_easy_ship_uses_negotiated_version(self, stub_request):
        module = await make_module(EasyShipModule, stub_request, api_version="2022-03-23")
        await module.list_handover_slots("123-1234567-1234567")

        method, path, options = stub_request.calls[0]
        assert (method, path) == ("POST", "/easyShip/2022-03-23/timeSlot")
        assert options["json"]["marketplaceId"] == MARKETPLACE_ID

    @pytest.mark.asyncio
    async def test_easy_ship_update_packages(self, stub_request):
        module = await make_module(EasyShipModule, stub_request)
        await module.update_scheduled_packages([{"amazonOrderId": "1"}])
        assert stub_request.calls[0][0] == "PATCH"

    @pytest.mark.asyncio
    async def test_authorization_code(self, stub_request):
        module = await make_module(AuthorizationModule, stub_request)
        await module.get_authorization_code("SP1", "DEV1", "MWS")

        method, path, options = stub_request.calls[0]
        assert path == "/authorization/v1/authorizationCode"
        assert options["params"] == {"sellingPartnerId": "SP1", "developerId": "DEV1", "mwsAuthToken": "MWS"}

    @pytest.mark.asyncio
    async def test_brand_protection_cases_by_asin(self, stub_request):
        stub_request.responses.extend(
            [
                ApiResponse(data={"cases": [{"caseId": "c1"}], "nextToken": "t"}),
                ApiResponse(data={"cases": [{"caseId": "c2"}]}),
            ]
        )
        module = await make_module(BrandProtectionModule, stub_request)

        cases = await module.get_cases_by_asin("B000TEST")

        assert [case["caseId"] for case in cases] == ["c1", "c2"]
        assert stub_request.calls[0][2]["json"] == {"marketplaceId": MARKETPLACE_ID, "asin": "B000TEST"}
        assert stub_request.calls[1][2]["json"]["nextToken"] == "t"

    @pytest.mark.asyncio
    async def test_product_type_definitions(self, stub_request):
        stub_request.responses.append(ApiResponse(data={"propertyGroups": {"offer": {"title": "Offer"}}}))
        module = await make_module(ProductTypeDefinitionsModule, stub_request)

        groups = await module.get_property_groups("LUGGAGE")

        assert groups == {"offer": {"title": "Offer"}}
        assert stub_request.calls[0][1] == "/definitions/2020-09-01/productTypes/LUGGAGE"

    @pytest.mark.asyncio
    async def test_application_integrations(self, stub_request):
        module = await make_module(ApplicationIntegrationsModule, stub_request)
        await module.delete_notifications("tmpl-1", "INCORRECT_CONTENT")

        method, path, options = stub_request.calls[0]
        assert path == "/appIntegrations/2024-04-01/notifications/deletion"
        assert options["json"] == {"templateId": "tmpl-1", "deletionReason": "INCORRECT_CONTENT"}


class TestArgumentChecks:
    """Test arguments rejected before any request is sent."""

    @pytest.mark.asyncio
    async def test_easy_ship_rejects_malformed_order_id(self, stub_request):
        module = await make_module(EasyShipModule, stub_request)

        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.list_handover_slots("not-an-order")

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert exc_info.value.context == "easyShip.list_handover_slots"
        assert stub_request.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_results", [0, 101, True])
    async def test_orders_page_size(self, stub_request, max_results):
        module = await make_module(OrdersModule, stub_request)
        with pytest.raises(MarketplaceAPIError):
            await module.get_orders(created_after="2024-01-01T00:00:00Z", max_results=max_results)

    @pytest.mark.asyncio
    async def test_vendors_limit(self, stub_request):
        module = await make_module(VendorsModule, stub_request)
        with pytest.raises(MarketplaceAPIError) as exc_info:
            await module.get_orders(limit=500)
        assert exc_info.value.context == "vendors.get_orders"
