"""Tests for StripeClient."""

from __future__ import annotations

import base64
import dataclasses
import inspect
import logging
from unittest.mock import patch
from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest

from netstripe import StripeClient, StripeConfig
from netstripe.errors import (
    APIError,
    ResponseDecodeError,
    ServerError,
    StripeError,
    StripeValidationError,
)
from netstripe.http import HttpxTransport
from netstripe.schemas import (
    Charge,
    Customer,
    EphemeralKey,
    InvoiceItem,
    Plan,
    StripeList,
    Subscription,
)

API_BASE = "https://api.stripe.com/v1"

INVALID_CURRENCY = {
    "error": {
        "type": "invalid_request_error",
        "message": "Invalid currency: zzz",
        "param": "currency",
    }
}


def _query(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlsplit(url).query)


def _path(url: str) -> str:
    return urlsplit(url).path


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    """Tests for building a client."""

    def test_api_key_string(self, transport) -> None:
        client = StripeClient("sk_test_123", transport=transport)
        assert client.config.api_key == "sk_test_123"
        assert client.api_base == API_BASE

    def test_options_override_config(self, transport) -> None:
        config = StripeConfig(api_key="sk_test_123", transport=transport)
        client = StripeClient(config, debug=True)
        assert client.config.debug is True
        assert config.debug is False

    def test_config_is_fixed(self, client, transport) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            client.config.api_key = "sk_test_other"  # type: ignore[misc]

        transport.queue({"object": "balance"})
        client.get_balance()
        auth = transport.last.headers["Authorization"]
        assert base64.b64decode(auth.split(" ", 1)[1]) == b"sk_test_123:"

    def test_api_base_trailing_slash(self, transport) -> None:
        client = StripeClient("sk_test_123", transport=transport, api_base="http://localhost/v1/")
        assert client.api_base == "http://localhost/v1"

    def test_missing_api_key(self) -> None:
        with pytest.raises(StripeValidationError):
            StripeClient("")

    @pytest.mark.parametrize("version", ["yesterday", "2099-01-01"])
    def test_bad_api_version(self, version: str) -> None:
        with pytest.raises(StripeValidationError):
            StripeClient("sk_test_123", api_version=version)

    def test_closes_owned_transport(self) -> None:
        with patch.object(HttpxTransport, "close") as close:
            with StripeClient("sk_test_123"):
                pass
        close.assert_called_once()

    def test_leaves_supplied_transport_open(self, transport) -> None:
        with StripeClient("sk_test_123", transport=transport):
            pass
        assert transport.closed is False

    def test_public_operations_are_documented(self) -> None:
        undocumented = [
            name
            for name, member in vars(StripeClient).items()
            if not name.startswith("_")
            and (inspect.isfunction(member) or isinstance(member, property))
            and not (member.__doc__ or "").strip()
        ]
        assert undocumented == []


# =============================================================================
# Requests
# =============================================================================


class TestRequests:
    """Tests for what goes over the wire."""

    def test_get_headers(self, client, transport, make_customer) -> None:
        transport.queue(make_customer())
        client.get_customer("cus_01")

        request = transport.last
        assert request.method == "GET"
        assert request.url == f"{API_BASE}/customers/cus_01"
        assert request.body is None
        auth = request.headers["Authorization"]
        assert base64.b64decode(auth.split(" ", 1)[1]) == b"sk_test_123:"
        assert request.headers["User-Agent"].startswith("netstripe/")
        assert "Content-Type" not in request.headers
        assert "Stripe-Version" not in request.headers

    def test_api_version_header(self, transport, make_customer) -> None:
        client = StripeClient("sk_test_123", transport=transport, api_version="2019-12-03")
        transport.queue(make_customer())
        client.get_customer("cus_01")
        assert transport.last.headers["Stripe-Version"] == "2019-12-03"

    def test_post_body(self, client, transport) -> None:
        transport.queue({"object": "charge", "id": "ch_1", "amount": 100, "paid": True})
        charge = client.post_charge(
            amount=100, currency="usd", card="tok_visa", metadata={"b": "2", "a": "1"}
        )

        assert isinstance(charge, Charge)
        assert charge.paid is True
        request = transport.last
        assert request.method == "POST"
        assert request.url == f"{API_BASE}/charges"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.body == [
            ("amount", "100"),
            ("currency", "usd"),
            ("card", "tok_visa"),
            ("metadata[a]", "1"),
            ("metadata[b]", "2"),
        ]

    def test_list_query(self, client, transport, make_list) -> None:
        transport.queue(make_list([]))
        page = client.get_customers(limit=10, created={"gte": 1397663381, "lte": 1397700000})

        assert isinstance(page, StripeList)
        assert _path(transport.last.url) == "/v1/customers"
        assert _query(transport.last.url) == [
            ("limit", "10"),
            ("created[gte]", "1397663381"),
            ("created[lte]", "1397700000"),
        ]

    def test_list_without_arguments_has_no_query(self, client, transport, make_list) -> None:
        transport.queue(make_list([], url="/v1/plans"))
        client.get_plans()
        assert transport.last.url == f"{API_BASE}/plans"

    def test_user_ids_are_escaped(self, client, transport) -> None:
        transport.queue({"object": "plan", "id": "gold plan/1"})
        plan = client.get_plan("gold plan/1")
        assert isinstance(plan, Plan)
        assert transport.last.url == f"{API_BASE}/plans/gold%20plan%2F1"

    def test_array_filters_repeat(self, client, transport, make_list) -> None:
        transport.queue(make_list([], url="/v1/products"))
        client.list_products(ids=["prod_1", "prod_2"], active=True)
        assert _query(transport.last.url) == [
            ("active", "true"),
            ("ids[]", "prod_1"),
            ("ids[]", "prod_2"),
        ]

    def test_transport_error_propagates(self, client, transport) -> None:
        transport.error = httpx.ConnectError("connection refused")
        with pytest.raises(httpx.ConnectError):
            client.get_customer("cus_01")


# =============================================================================
# Responses
# =============================================================================


class TestResponses:
    """Tests for decoding responses and errors."""

    def test_structured_error(self, client, transport) -> None:
        transport.queue(INVALID_CURRENCY, status_code=400)
        with pytest.raises(APIError) as exc_info:
            client.get_charge("ch_1")

        error = exc_info.value
        assert not isinstance(error, ServerError)
        assert error.type == "invalid_request_error"
        assert error.message == "Invalid currency: zzz"
        assert error.param == "currency"
        assert error.code is None
        assert error.http_status == 400
        assert error.json_body == INVALID_CURRENCY

    def test_card_error_code(self, client, transport) -> None:
        transport.queue(
            {"error": {"type": "card_error", "message": "declined", "code": "card_declined"}},
            status_code=402,
        )
        with pytest.raises(APIError) as exc_info:
            client.get_charge("ch_1")
        assert exc_info.value.code == "card_declined"

    def test_undecodable_error(self, client, transport) -> None:
        transport.queue(b"<html>oops</html>", status_code=404)
        with pytest.raises(ResponseDecodeError) as exc_info:
            client.get_charge("ch_1")

        error = exc_info.value
        assert error.type.startswith("Could not decode HTTP response")
        assert error.message == "404 Not Found - <html>oops</html>"
        assert error.http_body == "<html>oops</html>"

    def test_error_without_error_object(self, client, transport) -> None:
        transport.queue({"unexpected": True}, status_code=400)
        with pytest.raises(ResponseDecodeError):
            client.get_charge("ch_1")

    def test_server_error_with_body(self, client, transport) -> None:
        transport.queue({"error": {"type": "api_error", "message": "boom"}}, status_code=500)
        with pytest.raises(ServerError) as exc_info:
            client.get_charge("ch_1")
        assert exc_info.value.type == "api_error"
        assert exc_info.value.message == "boom"

    def test_server_error_without_body(self, client, transport) -> None:
        transport.queue(b"upstream unavailable", status_code=503)
        with pytest.raises(ServerError) as exc_info:
            client.get_charge("ch_1")

        error = exc_info.value
        assert error.type == "HTTP request error"
        assert error.code == "503"
        assert error.message == "503 Service Unavailable - upstream unavailable"

    def test_invalid_json_on_success(self, client, transport) -> None:
        transport.queue(b"{not json")
        with pytest.raises(ResponseDecodeError):
            client.get_charge("ch_1")

    def test_scalar_on_success(self, client, transport) -> None:
        transport.queue("hello")
        with pytest.raises(ResponseDecodeError, match="Invalid object type returned"):
            client.get_charge("ch_1")

    def test_top_level_array(self, client, transport) -> None:
        transport.queue([{"object": "charge", "id": "ch_1"}])
        page = client.get_charges(customer="cus_1")

        assert isinstance(page, StripeList)
        assert page.url == "/v1/charges"
        assert isinstance(page.first(), Charge)

    def test_deletion_acknowledgement(self, client, transport) -> None:
        transport.queue({"object": "plan", "id": "gold", "deleted": True})
        assert client.delete_plan("gold") == {"id": "gold", "deleted": True}
        assert transport.last.method == "DELETE"

    def test_deleted_customer(self, client, transport) -> None:
        transport.queue({"object": "customer", "id": "cus_1", "deleted": True})
        customer = client.delete_customer(Customer(id="cus_1"))
        assert isinstance(customer, Customer)
        assert customer.deleted is True
        assert transport.last.url == f"{API_BASE}/customers/cus_1"


# =============================================================================
# Logging
# =============================================================================


class TestLogging:
    """Tests for debug output."""

    def test_debug_logs_errors(self, transport, caplog) -> None:
        client = StripeClient("sk_test_123", transport=transport, debug=True)
        transport.queue(INVALID_CURRENCY, status_code=400)

        with caplog.at_level(logging.WARNING, logger="netstripe.client"):
            with pytest.raises(StripeError):
                client.get_charge("ch_1")

        assert "invalid_request_error: Invalid currency: zzz" in caplog.text

    def test_quiet_by_default(self, client, transport, caplog) -> None:
        transport.queue(INVALID_CURRENCY, status_code=400)

        with caplog.at_level(logging.DEBUG, logger="netstripe.client"):
            with pytest.raises(StripeError):
                client.get_charge("ch_1")

        assert caplog.records == []

    def test_debug_network(self, transport, caplog, make_customer) -> None:
        client = StripeClient("sk_test_123", transport=transport, debug_network=True)
        transport.queue(make_customer())

        with caplog.at_level(logging.INFO, logger="netstripe.client"):
            client.get_customer("cus_01")

        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith("Sending to Stripe: GET") for message in messages)
        assert any(message.startswith("Received from Stripe: 200") for message in messages)


# =============================================================================
# Operations
# =============================================================================


class TestCharges:
    """Tests for charge operations."""

    def test_customer_charge_requires_card_id(self, client, transport) -> None:
        with pytest.raises(StripeValidationError, match="can only accept a card id"):
            client.post_charge(amount=100, currency="usd", customer="cus_1", card="tok_visa")
        assert transport.requests == []

    def test_anonymous_charge_requires_token(self, client, transport) -> None:
        with pytest.raises(StripeValidationError, match="can only accept a token id"):
            client.post_charge(amount=100, currency="usd", card="card_123")
        assert transport.requests == []

    def test_customer_charge(self, client, transport) -> None:
        transport.queue({"object": "charge", "id": "ch_1"})
        client.post_charge(amount=100, currency="usd", customer="cus_1", card="card_123")
        assert ("customer", "cus_1") in transport.last.body
        assert ("card", "card_123") in transport.last.body

    def test_refund_charge(self, client, transport) -> None:
        transport.queue({"object": "refund", "id": "re_1", "amount": 50})
        client.refund_charge(Charge(id="ch_1"), amount=50)
        assert transport.last.url == f"{API_BASE}/charges/ch_1/refunds"
        assert transport.last.body == [("amount", "50")]

    def test_capture_charge(self, client, transport) -> None:
        transport.queue({"object": "charge", "id": "ch_1", "captured": True})
        assert client.capture_charge("ch_1").captured is True
        assert transport.last.url == f"{API_BASE}/charges/ch_1/capture"
        assert transport.last.body == []

    def test_create_refund(self, client, transport) -> None:
        transport.queue({"object": "refund", "id": "re_1"})
        client.create_refund("ch_1", amount=50, reason="duplicate")
        assert transport.last.body == [
            ("charge", "ch_1"),
            ("amount", "50"),
            ("reason", "duplicate"),
        ]


class TestCustomers:
    """Tests for customer operations."""

    def test_create(self, client, transport, make_customer) -> None:
        transport.queue(make_customer())
        client.post_customer(email="jane@example.com", card={"number": "4242", "exp_month": 1})
        assert transport.last.url == f"{API_BASE}/customers"
        assert transport.last.body == [
            ("source[number]", "4242"),
            ("source[exp_month]", "1"),
            ("email", "jane@example.com"),
        ]

    def test_update_by_id(self, client, transport, make_customer) -> None:
        transport.queue(make_customer())
        client.post_customer(customer="cus_01", description="vip")
        assert transport.last.url == f"{API_BASE}/customers/cus_01"
        assert transport.last.body == [("description", "vip")]

    def test_update_object(self, client, transport, make_customer) -> None:
        transport.queue(make_customer())
        client.post_customer(customer=Customer(id="cus_01", email="new@example.com"))
        assert transport.last.url == f"{API_BASE}/customers/cus_01"
        assert transport.last.body == [("email", "new@example.com")]

    def test_bad_customer_id(self, client) -> None:
        with pytest.raises(StripeValidationError):
            client.post_customer(customer="not_a_customer")

    def test_get_cards_filters_by_object(self, client, transport, make_list) -> None:
        transport.queue(make_list([], url="/v1/customers/cus_1/sources"))
        client.get_cards("cus_1", limit=3)
        assert _path(transport.last.url) == "/v1/customers/cus_1/sources"
        assert _query(transport.last.url) == [("object", "card"), ("limit", "3")]

    def test_post_card_with_token(self, client, transport) -> None:
        transport.queue({"object": "card", "id": "card_1"})
        client.post_card(customer="cus_1", card="tok_visa")
        assert transport.last.url == f"{API_BASE}/customers/cus_1/cards"
        assert transport.last.body == [("card", "tok_visa")]

    def test_delete_discount(self, client, transport) -> None:
        transport.queue({"deleted": True})
        assert client.delete_customer_discount("cus_1") == {"deleted": True}
        assert transport.last.url == f"{API_BASE}/customers/cus_1/discount"


class TestSubscriptions:
    """Tests for subscription operations."""

    def test_create(self, client, transport) -> None:
        transport.queue({"object": "subscription", "id": "sub_1"})
        client.post_subscription(customer="cus_1", plan=Plan(id="gold"))
        assert transport.last.url == f"{API_BASE}/customers/cus_1/subscriptions"
        assert transport.last.body == [("plan", "gold"), ("prorate", "true")]

    def test_update(self, client, transport) -> None:
        transport.queue({"object": "subscription", "id": "sub_1"})
        client.post_subscription(customer="cus_1", subscription="sub_1", quantity=2)
        assert transport.last.url == f"{API_BASE}/customers/cus_1/subscriptions/sub_1"
        assert transport.last.body == [("prorate", "true"), ("quantity", "2")]

    def test_delete_at_period_end(self, client, transport) -> None:
        transport.queue({"object": "subscription", "id": "sub_1", "cancel_at_period_end": True})
        client.delete_subscription(customer="cus_1", subscription="sub_1", at_period_end=True)
        assert transport.last.method == "DELETE"
        assert transport.last.url == (
            f"{API_BASE}/customers/cus_1/subscriptions/sub_1?at_period_end=true"
        )

    def test_current_subscription(self, client, transport, make_list) -> None:
        transport.queue(make_list([{"object": "subscription", "id": "sub_1"}]))
        subscription = client.get_subscription("cus_1")
        assert isinstance(subscription, Subscription)
        assert _query(transport.last.url) == [("limit", "1")]


class TestInvoices:
    """Tests for invoice and invoice item operations."""

    def test_upcoming(self, client, transport) -> None:
        transport.queue({"object": "invoice", "customer": "cus_1"})
        client.get_upcominginvoice("cus_1")
        assert transport.last.url == f"{API_BASE}/invoices/upcoming?customer=cus_1"

    def test_post_invoice_booleans(self, client, transport) -> None:
        transport.queue({"object": "invoice", "id": "in_1"})
        client.post_invoice("in_1", closed=True)
        assert transport.last.body == [("closed", "true")]

    def test_invoices_by_date(self, client, transport, make_list) -> None:
        transport.queue(make_list([], url="/v1/invoices"))
        client.get_invoices(customer="cus_1", date={"gt": 5})
        assert _query(transport.last.url) == [("customer", "cus_1"), ("date[gt]", "5")]

    def test_repost_invoiceitem(self, client, transport) -> None:
        transport.queue({"object": "invoiceitem", "id": "ii_1"})
        item = InvoiceItem(id="ii_1", customer="cus_1", amount=100, currency="usd")
        client.post_invoiceitem(item)
        assert transport.last.url == f"{API_BASE}/invoiceitems/ii_1"
        assert transport.last.body == [("amount", "100")]


class TestProducts:
    """Tests for product operations."""

    def test_clear_metadata(self, client, transport) -> None:
        transport.queue({"object": "product", "id": "prod_1"})
        client.update_product("prod_1", metadata="")
        assert transport.last.body == [("metadata", "")]

    def test_bad_type(self, client) -> None:
        with pytest.raises(StripeValidationError):
            client.create_product(name="Widget", type="gadget")


class TestPaymentMethods:
    """Tests for payment method and payment intent operations."""

    def test_attach(self, client, transport) -> None:
        transport.queue({"object": "payment_method", "id": "pm_1", "customer": "cus_1"})
        client.attach_payment_method("pm_1", customer="cus_1")
        assert transport.last.url == f"{API_BASE}/payment_methods/pm_1/attach"
        assert transport.last.body == [("customer", "cus_1")]

    def test_list(self, client, transport, make_list) -> None:
        transport.queue(make_list([], url="/v1/payment_methods"))
        client.list_payment_methods(customer="cus_1", type="card")
        assert _query(transport.last.url) == [("customer", "cus_1"), ("type", "card")]

    def test_bad_payment_method_id(self, client) -> None:
        with pytest.raises(StripeValidationError):
            client.get_payment_method("card_1")

    def test_create_payment_intent(self, client, transport) -> None:
        transport.queue({"object": "payment_intent", "id": "pi_1", "status": "requires_action"})
        intent = client.create_payment_intent(
            amount=500, currency="eur", payment_method_types=["card", "ideal"], confirm=False
        )
        assert intent.status == "requires_action"
        assert transport.last.body == [
            ("amount", "500"),
            ("confirm", "false"),
            ("currency", "eur"),
            ("payment_method_types[]", ["card", "ideal"]),
        ]

    def test_cancel_reason(self, client) -> None:
        with pytest.raises(StripeValidationError):
            client.cancel_payment_intent("pi_1", cancellation_reason="bored")


class TestEphemeralKeys:
    """Tests for ephemeral key operations."""

    def test_requires_api_version(self, client) -> None:
        with pytest.raises(StripeValidationError):
            client.create_ephemeral_key("cus_1")

    def test_create(self, transport) -> None:
        client = StripeClient("sk_test_123", transport=transport, api_version="2019-12-03")
        transport.queue({"object": "ephemeral_key", "id": "ephkey_1", "secret": "ek_1"})
        key = client.create_ephemeral_key("cus_1")
        assert isinstance(key, EphemeralKey)
        assert transport.last.body == [("customer", "cus_1")]
        assert transport.last.headers["Stripe-Version"] == "2019-12-03"
