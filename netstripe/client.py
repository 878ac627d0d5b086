"""StripeClient - one blocking round trip per API operation.

Each operation builds a path and a form body, sends it through the
configured Transport, and returns the materialized response or raises a
StripeError.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union
from urllib.parse import quote

from .constants import (
    AUTHORIZATION_HEADER,
    CONTENT_TYPE_HEADER,
    DEFAULT_API_BASE,
    DEFAULT_TIMEOUT,
    FORM_CONTENT_TYPE,
    STRIPE_VERSION_HEADER,
    USER_AGENT,
    USER_AGENT_HEADER,
)
from .encoding import (
    FormPair,
    basic_auth_header,
    convert_to_form_fields,
    encode_value,
    form_fields,
    range_filter_fields,
)
from .errors import (
    APIError,
    ResponseDecodeError,
    ServerError,
    StripeError,
    StripeValidationError,
)
from .http import HttpxTransport, Transport, TransportResponse, encode_form_body
from .materialize import ResponseMaterializer
from .registry import ObjectRegistry
from .schemas import (
    Card,
    Charge,
    Coupon,
    Customer,
    EphemeralKey,
    InvoiceItem,
    PaymentIntent,
    PaymentMethod,
    Plan,
    Product,
    Refund,
    Source,
    StripeObject,
    Subscription,
    Token,
)
from .validation import (
    CANCELLATION_REASONS,
    CAPTURE_METHODS,
    CONFIRMATION_METHODS,
    PAYMENT_METHOD_TYPES,
    PRODUCT_TYPES,
    SETUP_FUTURE_USAGES,
    SOURCE_FLOWS,
    SOURCE_TYPES,
    SOURCE_USAGES,
    is_valid_id,
    validate_api_version,
    validate_choice,
    validate_choices,
    validate_id,
    validate_non_negative,
    validate_statement_descriptor,
)

logger = logging.getLogger(__name__)

# An object id, or any object carrying one
IdOrObject = Union[str, StripeObject]

RequestBody = Union[StripeObject, Mapping[str, Any], None]

DECODE_ERROR_PREFIX = "Could not decode HTTP response"
HTTP_REQUEST_ERROR = "HTTP request error"


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class StripeConfig:
    """Configuration for StripeClient."""

    api_key: str
    api_base: str = DEFAULT_API_BASE
    api_version: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    transport: Optional[Transport] = None
    debug: bool = False
    debug_network: bool = False


# ============================================================================
# StripeClient
# ============================================================================


class StripeClient:
    """Typed client for the Stripe REST API.

    Example:
        ```python
        with StripeClient("sk_test_123") as stripe:
            customer = stripe.post_customer(email="jane@example.com")
            charge = stripe.post_charge(
                amount=1000,
                currency="usd",
                customer=customer.id,
                card="card_123",
            )
        ```
    """

    def __init__(
        self,
        config: StripeConfig | str,
        registry: ObjectRegistry | None = None,
        **options: Any,
    ) -> None:
        """Create a client.

        Args:
            config: A StripeConfig, or an API key.
            registry: Optional registry used to materialize responses.
            **options: StripeConfig fields overriding those in config.

        Raises:
            StripeValidationError: If the API key is missing or the API
                version is malformed or unsupported.
        """
        if isinstance(config, str):
            config = StripeConfig(api_key=config, **options)
        elif options:
            config = dataclasses.replace(config, **options)

        if not config.api_key:
            raise StripeValidationError("An API key is required", param="api_key")
        if config.api_version is not None:
            validate_api_version(config.api_version)

        self._config = config
        self._api_base = config.api_base.rstrip("/")
        self._transport: Transport = config.transport or HttpxTransport(timeout=config.timeout)
        self._owns_transport = config.transport is None
        self._materializer = ResponseMaterializer(registry)

    def close(self) -> None:
        """Close the transport if we own it."""
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> StripeClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def api_base(self) -> str:
        """Base URL requests are sent to, without a trailing slash."""
        return self._api_base

    @property
    def api_version(self) -> str | None:
        """API version sent as ``Stripe-Version``, if any."""
        return self._config.api_version

    @property
    def config(self) -> StripeConfig:
        """The configuration this client was built with."""
        return self._config

    # =========================================================================
    # Charges
    # =========================================================================

    def post_charge(
        self,
        amount: int,
        currency: str,
        customer: str | None = None,
        card: IdOrObject | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        capture: bool | None = None,
        statement_descriptor: str | None = None,
        application_fee: int | None = None,
        receipt_email: str | None = None,
    ) -> Charge:
        """Create a charge.

        With a customer, ``card`` must be one of the customer's card ids.
        Without one it must be a token id.

        Raises:
            StripeValidationError: If card does not fit the customer, or the
                statement descriptor is invalid.
        """
        if customer is not None:
            validate_id("customer", customer)
        if card is not None:
            card_id = _id_of(card)
            if customer is not None and not is_valid_id("card", card_id):
                raise StripeValidationError(
                    f"Invalid value '{card_id}' passed for parameter 'card'. Charges for an "
                    "existing customer can only accept a card id.",
                    param="card",
                )
            if customer is None and not is_valid_id("token", card_id):
                raise StripeValidationError(
                    f"Invalid value '{card_id}' passed for parameter 'card'. Charges without "
                    "an existing customer can only accept a token id.",
                    param="card",
                )
            card = card_id
        validate_statement_descriptor(statement_descriptor)

        charge = Charge(
            amount=amount,
            currency=currency,
            customer=customer,
            card=card,
            description=description,
            metadata=metadata,
            capture=capture,
            statement_descriptor=statement_descriptor,
            application_fee=application_fee,
            receipt_email=receipt_email,
        )
        return self._post("charges", charge)

    def get_charge(self, charge_id: str) -> Charge:
        """Retrieve a charge by id."""
        return self._get(f"charges/{charge_id}")

    def refund_charge(self, charge: IdOrObject, amount: int | None = None) -> Refund:
        """Refund a charge, in full unless ``amount`` is given."""
        charge_id = _id_of(charge)
        refund = Refund(amount=amount)
        return self._post(f"charges/{charge_id}/refunds", refund)

    def get_charges(
        self,
        created: dict[str, int] | int | None = None,
        customer: IdOrObject | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List charges, newest first, optionally for one customer."""
        return self._get_collections(
            "charges",
            created=created,
            customer=_id_of(customer),
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    def capture_charge(self, charge: IdOrObject, amount: int | None = None) -> Charge:
        """Capture an uncaptured charge, optionally for less than its amount."""
        return self._post(f"charges/{_id_of(charge)}/capture", {"amount": amount})

    # =========================================================================
    # Balance
    # =========================================================================

    def get_balance_transaction(self, id: str) -> Any:
        """Retrieve one balance history entry."""
        return self._get(f"balance/history/{id}")

    def get_balance(self) -> Any:
        """Retrieve the account's current balance."""
        return self._get("balance")

    # =========================================================================
    # Customers
    # =========================================================================

    def post_customer(
        self,
        customer: IdOrObject | None = None,
        balance: int | None = None,
        card: IdOrObject | dict[str, Any] | None = None,
        coupon: IdOrObject | None = None,
        default_card: str | None = None,
        description: str | None = None,
        email: str | None = None,
        metadata: dict[str, Any] | None = None,
        plan: IdOrObject | None = None,
        quantity: int | None = None,
        trial_end: int | str | None = None,
    ) -> Customer:
        """Create a customer, or update one when its id is known.

        Args:
            customer: An existing Customer to post as is, or the id of the
                customer to update. Omit to create a new customer.
            balance: Account balance in the smallest currency unit.
            card: Token id, Token, or a new card as a dict.

        Returns:
            The created or updated Customer.
        """
        if isinstance(customer, Customer):
            customer_obj = customer
        else:
            validate_non_negative("quantity", quantity)
            args: dict[str, Any] = {
                "balance": balance,
                "source": card,
                "coupon": coupon,
                "default_source": default_card,
                "description": description,
                "email": email,
                "metadata": metadata,
                "plan": plan,
                "quantity": quantity,
                "trial_end": trial_end,
            }
            if customer is not None:
                args["id"] = validate_id("customer", _id_of(customer))
            customer_obj = Customer(**args)

        if customer_obj.id:
            return self._post(f"customers/{customer_obj.id}", customer_obj)
        return self._post("customers", customer_obj)

    def get_customer(self, customer_id: str) -> Customer:
        """Retrieve a customer by id."""
        return self._get(f"customers/{customer_id}")

    def delete_customer(self, customer: IdOrObject) -> Any:
        """Delete a customer. Returns the deleted Customer."""
        return self._delete(f"customers/{_id_of(customer)}")

    def get_customers(
        self,
        created: dict[str, int] | int | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
        email: str | None = None,
    ) -> Any:
        """List customers, optionally filtered by email."""
        return self._get_collections(
            "customers",
            created=created,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
            email=email,
        )

    def list_subscriptions(
        self,
        customer: IdOrObject,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List a customer's subscriptions."""
        return self._get_collections(
            f"customers/{_id_of(customer)}/subscriptions",
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Cards
    # =========================================================================

    def get_card(self, customer: IdOrObject, card_id: str) -> Card:
        """Retrieve one of a customer's cards."""
        return self._get(f"customers/{_id_of(customer)}/cards/{card_id}")

    def get_cards(
        self,
        customer: IdOrObject,
        created: dict[str, int] | int | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List the cards among a customer's sources."""
        return self._get_collections(
            f"customers/{_id_of(customer)}/sources",
            object="card",
            created=created,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    def post_card(self, customer: IdOrObject, card: IdOrObject | dict[str, Any]) -> Card:
        """Add a card to a customer.

        Args:
            customer: Customer or customer id.
            card: Token, token id, or a new card as a dict.
        """
        customer_id = validate_id("customer", _id_of(customer))
        if isinstance(card, Mapping):
            return self._post(f"customers/{customer_id}/cards", Card.model_validate(card))
        token_id = validate_id("token", _id_of(card), param="card")
        return self._post(f"customers/{customer_id}/cards", {"card": token_id})

    def update_card(self, customer_id: str, card_id: str, card: dict[str, Any]) -> Card:
        """Update a customer's card with the given fields."""
        validate_id("customer", customer_id)
        validate_id("card", card_id)
        return self._post(f"customers/{customer_id}/cards/{card_id}", card)

    def delete_card(self, customer: IdOrObject, card: IdOrObject) -> Any:
        """Remove a card from a customer."""
        return self._delete(f"customers/{_id_of(customer)}/cards/{_id_of(card)}")

    # =========================================================================
    # Sources
    # =========================================================================

    def create_source(
        self,
        type: str,
        amount: int | None = None,
        currency: str | None = None,
        flow: str | None = None,
        mandate: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
        owner: dict[str, Any] | None = None,
        receiver: dict[str, Any] | None = None,
        redirect: dict[str, Any] | None = None,
        source_order: dict[str, Any] | None = None,
        statement_descriptor: str | None = None,
        token: str | None = None,
        usage: str | None = None,
    ) -> Source:
        """Create a source of the given type."""
        validate_choice("type", type, SOURCE_TYPES)
        validate_choice("flow", flow, SOURCE_FLOWS)
        validate_choice("usage", usage, SOURCE_USAGES)
        if token is not None:
            validate_id("token", token)
        validate_statement_descriptor(statement_descriptor)

        source = Source(
            type=type,
            amount=amount,
            currency=currency,
            flow=flow,
            mandate=mandate,
            metadata=metadata,
            owner=owner,
            receiver=receiver,
            redirect=redirect,
            source_order=source_order,
            statement_descriptor=statement_descriptor,
            token=token,
            usage=usage,
        )
        return self._post("sources", source)

    def get_source(self, source_id: str, client_secret: str | None = None) -> Source:
        """Retrieve a source, passing its client secret when known."""
        validate_id("source", source_id)
        query = encode_value("client_secret", client_secret)
        return self._get(f"sources/{source_id}", query)

    def update_source(
        self,
        source_id: str,
        amount: int | None = None,
        mandate: dict[str, Any] | None = None,
        metadata: dict[str, Any] | str | None = None,
        owner: dict[str, Any] | None = None,
        source_order: dict[str, Any] | None = None,
    ) -> Source:
        """Update a source. ``metadata=""`` or ``{}`` clears its metadata."""
        validate_id("source", source_id)
        if all(value is None for value in (amount, mandate, metadata, owner, source_order)):
            raise StripeValidationError(
                "at least one of amount, mandate, metadata, owner or source_order "
                "must be specified",
            )

        source = Source(
            amount=amount,
            mandate=mandate,
            metadata=metadata,
            owner=owner,
            source_order=source_order,
        )
        return self._post(f"sources/{source_id}", source)

    def attach_source(self, customer_id: str, source_id: str) -> Source:
        """Attach a source to a customer."""
        validate_id("customer", customer_id)
        validate_id("source", source_id)
        return self._post(f"customers/{customer_id}/sources", {"source": source_id})

    def detach_source(self, source_id: str, customer_id: str | None = None) -> Source:
        """Detach a source, from its customer if one is given."""
        validate_id("source", source_id)
        if customer_id is not None:
            validate_id("customer", customer_id)
            return self._delete(f"customers/{customer_id}/sources/{source_id}")
        return self._post(f"sources/{source_id}/detach")

    def list_sources(
        self,
        customer_id: str,
        object: str | None = "source",
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List a customer's sources, of type ``object`` unless it is None."""
        validate_id("customer", customer_id)
        return self._get_collections(
            f"customers/{customer_id}/sources",
            object=object,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def get_subscription(self, customer: IdOrObject, subscription_id: str | None = None) -> Any:
        """Retrieve a customer's subscription.

        Without a subscription id this is the customer's first subscription,
        fetched from the subscription list.
        """
        customer_id = _id_of(customer)
        if subscription_id is not None:
            return self._get(f"customers/{customer_id}/subscriptions/{subscription_id}")
        subscriptions = self.list_subscriptions(customer_id, limit=1)
        return subscriptions.first()

    def post_subscription(
        self,
        customer: IdOrObject,
        subscription: IdOrObject | None = None,
        plan: IdOrObject | None = None,
        coupon: IdOrObject | None = None,
        trial_end: int | str | None = None,
        card: IdOrObject | dict[str, Any] | None = None,
        quantity: int | None = None,
        application_fee_percent: float | None = None,
        prorate: bool | None = True,
    ) -> Subscription:
        """Add a subscription to a customer, or update an existing one.

        Args:
            customer: Customer or customer id.
            subscription: A Subscription to post as is, or the id of the
                subscription to update. Omit to add a new subscription.
            plan: Plan or plan id.
            trial_end: Epoch timestamp, or "now".
        """
        customer_id = _id_of(customer)
        if not isinstance(subscription, Subscription):
            validate_non_negative("quantity", quantity)
            args: dict[str, Any] = {
                "plan": _id_of(plan),
                "coupon": coupon,
                "trial_end": trial_end,
                "card": card,
                "prorate": prorate,
                "quantity": quantity,
                "application_fee_percent": application_fee_percent,
            }
            if subscription is not None:
                args["id"] = _id_of(subscription)
            subscription = Subscription(**args)

        if subscription.id is not None:
            return self._post(
                f"customers/{customer_id}/subscriptions/{subscription.id}", subscription
            )
        return self._post(f"customers/{customer_id}/subscriptions", subscription)

    def delete_subscription(
        self,
        customer: IdOrObject,
        subscription: IdOrObject,
        at_period_end: bool | None = None,
    ) -> Subscription:
        """Cancel a subscription, immediately or at the end of the period."""
        query: list[FormPair] = [("at_period_end", "true")] if at_period_end else []
        return self._delete(
            f"customers/{_id_of(customer)}/subscriptions/{_id_of(subscription)}", query
        )

    # =========================================================================
    # Tokens
    # =========================================================================

    def get_token(self, token_id: str) -> Token:
        """Retrieve a token by id."""
        return self._get(f"tokens/{token_id}")

    def post_token(
        self,
        card: Card | dict[str, Any],
        amount: int | None = None,
        currency: str | None = None,
    ) -> Token:
        """Create a single-use card token from card details."""
        token = Token(card=card, amount=amount, currency=currency)
        return self._post("tokens", token)

    # =========================================================================
    # Plans
    # =========================================================================

    def post_plan(
        self,
        id: str,
        amount: int,
        currency: str,
        interval: str,
        name: str,
        interval_count: int | None = None,
        trial_period_days: int | None = None,
        metadata: dict[str, Any] | None = None,
        statement_descriptor: str | None = None,
    ) -> Plan:
        """Create a plan."""
        validate_statement_descriptor(statement_descriptor)
        plan = Plan(
            id=id,
            amount=amount,
            currency=currency,
            interval=interval,
            interval_count=interval_count,
            name=name,
            trial_period_days=trial_period_days,
            metadata=metadata,
            statement_descriptor=statement_descriptor,
        )
        return self._post("plans", plan)

    def get_plan(self, plan_id: str) -> Plan:
        """Retrieve a plan. The id is escaped for use in the path."""
        return self._get(f"plans/{_escape(plan_id)}")

    def delete_plan(self, plan: IdOrObject) -> Any:
        """Delete a plan."""
        return self._delete(f"plans/{_escape(_id_of(plan))}")

    def get_plans(
        self,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List plans."""
        return self._get_collections(
            "plans",
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Coupons
    # =========================================================================

    def post_coupon(
        self,
        duration: str,
        id: str | None = None,
        amount_off: int | None = None,
        currency: str | None = None,
        duration_in_months: int | None = None,
        max_redemptions: int | None = None,
        metadata: dict[str, Any] | None = None,
        percent_off: float | None = None,
        redeem_by: int | None = None,
    ) -> Coupon:
        """Create a coupon, for either an amount or a percentage off."""
        coupon = Coupon(
            id=id,
            duration=duration,
            amount_off=amount_off,
            currency=currency,
            duration_in_months=duration_in_months,
            max_redemptions=max_redemptions,
            metadata=metadata,
            percent_off=percent_off,
            redeem_by=redeem_by,
        )
        return self._post("coupons", coupon)

    def get_coupon(self, coupon_id: str) -> Coupon:
        """Retrieve a coupon. The id is escaped for use in the path."""
        return self._get(f"coupons/{_escape(coupon_id)}")

    def delete_coupon(self, coupon: IdOrObject) -> Any:
        """Delete a coupon."""
        return self._delete(f"coupons/{_escape(_id_of(coupon))}")

    def get_coupons(
        self,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List coupons."""
        return self._get_collections(
            "coupons",
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Discounts
    # =========================================================================

    def delete_customer_discount(self, customer: IdOrObject) -> Any:
        """Remove a customer-wide discount. Returns ``{"deleted": True, ...}``."""
        return self._delete(f"customers/{_id_of(customer)}/discount")

    # =========================================================================
    # Invoices
    # =========================================================================

    def create_invoice(
        self,
        customer: IdOrObject,
        application_fee: int | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        subscription: IdOrObject | None = None,
    ) -> Any:
        """Create an invoice from the customer's pending invoice items."""
        return self._post(
            "invoices",
            {
                "customer": _id_of(customer),
                "application_fee": application_fee,
                "description": description,
                "metadata": metadata,
                "subscription": _id_of(subscription),
            },
        )

    def post_invoice(
        self,
        invoice: IdOrObject,
        application_fee: int | None = None,
        closed: bool | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Any:
        """Update an invoice."""
        return self._post(
            f"invoices/{_id_of(invoice)}",
            {
                "application_fee": application_fee,
                "closed": closed,
                "description": description,
                "metadata": metadata,
            },
        )

    def get_invoice(self, invoice_id: str) -> Any:
        """Retrieve an invoice by id."""
        return self._get(f"invoices/{invoice_id}")

    def pay_invoice(self, invoice_id: str) -> Any:
        """Attempt payment of an open invoice."""
        return self._post(f"invoices/{invoice_id}/pay")

    def get_invoices(
        self,
        customer: IdOrObject | None = None,
        date: dict[str, int] | int | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List invoices, optionally for one customer or a date range."""
        return self._get_collections(
            "invoices",
            customer=_id_of(customer),
            date=date,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    def get_upcominginvoice(self, customer: IdOrObject) -> Any:
        """Preview the customer's next invoice."""
        return self._get("invoices/upcoming", [("customer", _id_of(customer))])

    # =========================================================================
    # Invoice items
    # =========================================================================

    def create_invoiceitem(
        self,
        customer: IdOrObject,
        amount: int,
        currency: str,
        invoice: IdOrObject | None = None,
        subscription: IdOrObject | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> InvoiceItem:
        """Add an invoice item to a customer's next invoice."""
        invoiceitem = InvoiceItem(
            customer=_id_of(customer),
            amount=amount,
            currency=currency,
            invoice=_id_of(invoice),
            subscription=_id_of(subscription),
            description=description,
            metadata=metadata,
        )
        return self._post("invoiceitems", invoiceitem)

    def post_invoiceitem(
        self,
        invoice_item: IdOrObject,
        amount: int | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> InvoiceItem:
        """Update an invoice item.

        With no changes given, an InvoiceItem is posted back as it is,
        without its currency, which cannot change.
        """
        if amount is None and description is None and metadata is None:
            if not isinstance(invoice_item, InvoiceItem):
                raise StripeValidationError(
                    "an InvoiceItem, or at least one of amount, description or metadata, "
                    "must be specified",
                    param="invoice_item",
                )
            item = invoice_item.model_copy(update={"currency": None})
            return self._post(f"invoiceitems/{item.id}", item)

        return self._post(
            f"invoiceitems/{_id_of(invoice_item)}",
            {"amount": amount, "description": description, "metadata": metadata},
        )

    def get_invoiceitem(self, invoice_item: str) -> InvoiceItem:
        """Retrieve an invoice item by id."""
        return self._get(f"invoiceitems/{invoice_item}")

    def delete_invoiceitem(self, invoice_item: IdOrObject) -> Any:
        """Delete an invoice item that is not yet on an invoice."""
        return self._delete(f"invoiceitems/{_id_of(invoice_item)}")

    def get_invoiceitems(
        self,
        created: dict[str, int] | int | None = None,
        customer: IdOrObject | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List invoice items."""
        return self._get_collections(
            "invoiceitems",
            created=created,
            customer=_id_of(customer),
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Refunds
    # =========================================================================

    def create_refund(
        self,
        charge: IdOrObject,
        amount: int | None = None,
        metadata: dict[str, Any] | None = None,
        reason: str | None = None,
        refund_application_fee: bool | None = None,
    ) -> Refund:
        """Refund a charge."""
        refund = Refund(
            amount=amount,
            metadata=metadata,
            reason=reason,
            refund_application_fee=refund_application_fee,
        )
        pairs = [("charge", _id_of(charge)), *form_fields(refund)]
        return self._request("POST", "refunds", body=pairs)

    def get_refund(self, refund_id: str) -> Refund:
        """Retrieve a refund by id."""
        return self._get(f"refunds/{refund_id}")

    def get_refunds(
        self,
        charge: IdOrObject | None = None,
        created: dict[str, int] | int | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List refunds, optionally for one charge."""
        return self._get_collections(
            "refunds",
            charge=_id_of(charge),
            created=created,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Products
    # =========================================================================

    def create_product(
        self,
        name: str,
        id: str | None = None,
        active: bool | None = None,
        attributes: list[str] | None = None,
        caption: str | None = None,
        deactivate_on: list[str] | None = None,
        description: str | None = None,
        images: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        package_dimensions: dict[str, float] | None = None,
        shippable: bool | None = None,
        statement_descriptor: str | None = None,
        type: str | None = None,
        unit_label: str | None = None,
        url: str | None = None,
    ) -> Product:
        """Create a product."""
        validate_choice("type", type, PRODUCT_TYPES)
        validate_statement_descriptor(statement_descriptor)
        product = Product(
            id=id,
            name=name,
            active=active,
            attributes=attributes,
            caption=caption,
            deactivate_on=deactivate_on,
            description=description,
            images=images,
            metadata=metadata,
            package_dimensions=package_dimensions,
            shippable=shippable,
            statement_descriptor=statement_descriptor,
            type=type,
            unit_label=unit_label,
            url=url,
        )
        return self._post("products", product)

    def get_product(self, product_id: str) -> Product:
        """Retrieve a product. The id is escaped for use in the path."""
        return self._get(f"products/{_escape(product_id)}")

    def update_product(
        self,
        product_id: str,
        active: bool | None = None,
        attributes: list[str] | None = None,
        caption: str | None = None,
        deactivate_on: list[str] | None = None,
        description: str | None = None,
        images: list[str] | None = None,
        metadata: dict[str, Any] | str | None = None,
        name: str | None = None,
        package_dimensions: dict[str, float] | None = None,
        shippable: bool | None = None,
        statement_descriptor: str | None = None,
        unit_label: str | None = None,
        url: str | None = None,
    ) -> Product:
        """Update a product. ``metadata=""`` or ``{}`` clears its metadata."""
        validate_statement_descriptor(statement_descriptor)
        product = Product(
            active=active,
            attributes=attributes,
            caption=caption,
            deactivate_on=deactivate_on,
            description=description,
            images=images,
            metadata=metadata,
            name=name,
            package_dimensions=package_dimensions,
            shippable=shippable,
            statement_descriptor=statement_descriptor,
            unit_label=unit_label,
            url=url,
        )
        return self._post(f"products/{_escape(product_id)}", product)

    def delete_product(self, product_id: str) -> Any:
        """Delete a product."""
        return self._delete(f"products/{_escape(product_id)}")

    def list_products(
        self,
        active: bool | None = None,
        ids: list[str] | None = None,
        shippable: bool | None = None,
        type: str | None = None,
        url: str | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List products matching the given filters."""
        validate_choice("type", type, PRODUCT_TYPES)
        return self._get_collections(
            "products",
            active=active,
            ids=ids,
            shippable=shippable,
            type=type,
            url=url,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Payment methods
    # =========================================================================

    def create_payment_method(
        self,
        type: str,
        billing_details: dict[str, Any] | None = None,
        card: IdOrObject | dict[str, Any] | None = None,
        fpx: dict[str, Any] | None = None,
        ideal: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
        sepa_debit: dict[str, Any] | None = None,
    ) -> PaymentMethod:
        """Create a payment method."""
        validate_choice("type", type, PAYMENT_METHOD_TYPES)
        payment_method = PaymentMethod(
            type=type,
            billing_details=billing_details,
            card=card,
            fpx=fpx,
            ideal=ideal,
            metadata=metadata,
            sepa_debit=sepa_debit,
        )
        return self._post("payment_methods", payment_method)

    def get_payment_method(self, payment_method_id: str) -> PaymentMethod:
        """Retrieve a payment method by id."""
        validate_id("payment_method", payment_method_id)
        return self._get(f"payment_methods/{payment_method_id}")

    def update_payment_method(
        self,
        payment_method_id: str,
        billing_details: dict[str, Any] | None = None,
        card: dict[str, Any] | None = None,
        metadata: dict[str, Any] | str | None = None,
        sepa_debit: dict[str, Any] | None = None,
    ) -> PaymentMethod:
        """Update a payment method."""
        validate_id("payment_method", payment_method_id)
        payment_method = PaymentMethod(
            billing_details=billing_details,
            card=card,
            metadata=metadata,
            sepa_debit=sepa_debit,
        )
        return self._post(f"payment_methods/{payment_method_id}", payment_method)

    def attach_payment_method(self, payment_method_id: str, customer: IdOrObject) -> PaymentMethod:
        """Attach a payment method to a customer."""
        validate_id("payment_method", payment_method_id)
        customer_id = validate_id("customer", _id_of(customer))
        return self._post(f"payment_methods/{payment_method_id}/attach", {"customer": customer_id})

    def detach_payment_method(self, payment_method_id: str) -> PaymentMethod:
        """Detach a payment method from its customer."""
        validate_id("payment_method", payment_method_id)
        return self._post(f"payment_methods/{payment_method_id}/detach")

    def list_payment_methods(
        self,
        customer: IdOrObject,
        type: str,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List a customer's payment methods of one type."""
        customer_id = validate_id("customer", _id_of(customer))
        validate_choice("type", type, PAYMENT_METHOD_TYPES)
        return self._get_collections(
            "payment_methods",
            customer=customer_id,
            type=type,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Payment intents
    # =========================================================================

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        application_fee_amount: int | None = None,
        capture_method: str | None = None,
        confirm: bool | None = None,
        confirmation_method: str | None = None,
        customer: IdOrObject | None = None,
        description: str | None = None,
        error_on_requires_action: bool | None = None,
        mandate: str | None = None,
        mandate_data: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
        off_session: bool | None = None,
        on_behalf_of: str | None = None,
        payment_method: IdOrObject | None = None,
        payment_method_options: dict[str, Any] | None = None,
        payment_method_types: list[str] | None = None,
        receipt_email: str | None = None,
        return_url: str | None = None,
        save_payment_method: bool | None = None,
        setup_future_usage: str | None = None,
        shipping: dict[str, Any] | None = None,
        statement_descriptor: str | None = None,
        statement_descriptor_suffix: str | None = None,
        transfer_data: dict[str, Any] | None = None,
        transfer_group: str | None = None,
        use_stripe_sdk: bool | None = None,
    ) -> PaymentIntent:
        """Create a payment intent."""
        validate_choice("capture_method", capture_method, CAPTURE_METHODS)
        validate_choice("confirmation_method", confirmation_method, CONFIRMATION_METHODS)
        validate_choice("setup_future_usage", setup_future_usage, SETUP_FUTURE_USAGES)
        validate_choices("payment_method_types", payment_method_types, PAYMENT_METHOD_TYPES)
        validate_statement_descriptor(statement_descriptor)
        customer_id = _id_of(customer)
        if customer_id is not None:
            validate_id("customer", customer_id)
        payment_method_id = _id_of(payment_method)
        if payment_method_id is not None:
            validate_id("payment_method", payment_method_id)

        payment_intent = PaymentIntent(
            amount=amount,
            currency=currency,
            application_fee_amount=application_fee_amount,
            capture_method=capture_method,
            confirm=confirm,
            confirmation_method=confirmation_method,
            customer=customer_id,
            description=description,
            error_on_requires_action=error_on_requires_action,
            mandate=mandate,
            mandate_data=mandate_data,
            metadata=metadata,
            off_session=off_session,
            on_behalf_of=on_behalf_of,
            payment_method=payment_method_id,
            payment_method_options=payment_method_options,
            payment_method_types=payment_method_types,
            receipt_email=receipt_email,
            return_url=return_url,
            save_payment_method=save_payment_method,
            setup_future_usage=setup_future_usage,
            shipping=shipping,
            statement_descriptor=statement_descriptor,
            statement_descriptor_suffix=statement_descriptor_suffix,
            transfer_data=transfer_data,
            transfer_group=transfer_group,
            use_stripe_sdk=use_stripe_sdk,
        )
        return self._post("payment_intents", payment_intent)

    def get_payment_intent(
        self, payment_intent_id: str, client_secret: str | None = None
    ) -> PaymentIntent:
        """Retrieve a payment intent."""
        validate_id("payment_intent", payment_intent_id)
        query = encode_value("client_secret", client_secret)
        return self._get(f"payment_intents/{payment_intent_id}", query)

    def update_payment_intent(
        self,
        payment_intent_id: str,
        amount: int | None = None,
        application_fee_amount: int | None = None,
        currency: str | None = None,
        customer: IdOrObject | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | str | None = None,
        payment_method: IdOrObject | None = None,
        payment_method_types: list[str] | None = None,
        receipt_email: str | None = None,
        save_payment_method: bool | None = None,
        setup_future_usage: str | None = None,
        shipping: dict[str, Any] | None = None,
        statement_descriptor: str | None = None,
        statement_descriptor_suffix: str | None = None,
        transfer_group: str | None = None,
    ) -> PaymentIntent:
        """Update a payment intent. ``metadata=""`` or ``{}`` clears its metadata."""
        validate_id("payment_intent", payment_intent_id)
        validate_choice("setup_future_usage", setup_future_usage, SETUP_FUTURE_USAGES)
        validate_choices("payment_method_types", payment_method_types, PAYMENT_METHOD_TYPES)
        validate_statement_descriptor(statement_descriptor)

        payment_intent = PaymentIntent(
            amount=amount,
            application_fee_amount=application_fee_amount,
            currency=currency,
            customer=_id_of(customer),
            description=description,
            metadata=metadata,
            payment_method=_id_of(payment_method),
            payment_method_types=payment_method_types,
            receipt_email=receipt_email,
            save_payment_method=save_payment_method,
            setup_future_usage=setup_future_usage,
            shipping=shipping,
            statement_descriptor=statement_descriptor,
            statement_descriptor_suffix=statement_descriptor_suffix,
            transfer_group=transfer_group,
        )
        return self._post(f"payment_intents/{payment_intent_id}", payment_intent)

    def confirm_payment_intent(
        self,
        payment_intent_id: str,
        client_secret: str | None = None,
        error_on_requires_action: bool | None = None,
        mandate: str | None = None,
        mandate_data: dict[str, Any] | None = None,
        off_session: bool | None = None,
        payment_method: IdOrObject | None = None,
        payment_method_options: dict[str, Any] | None = None,
        payment_method_types: list[str] | None = None,
        receipt_email: str | None = None,
        return_url: str | None = None,
        save_payment_method: bool | None = None,
        setup_future_usage: str | None = None,
        shipping: dict[str, Any] | None = None,
        use_stripe_sdk: bool | None = None,
    ) -> PaymentIntent:
        """Confirm a payment intent, starting the payment attempt."""
        validate_id("payment_intent", payment_intent_id)
        validate_choice("setup_future_usage", setup_future_usage, SETUP_FUTURE_USAGES)
        validate_choices("payment_method_types", payment_method_types, PAYMENT_METHOD_TYPES)

        payment_intent = PaymentIntent(
            client_secret=client_secret,
            error_on_requires_action=error_on_requires_action,
            mandate=mandate,
            mandate_data=mandate_data,
            off_session=off_session,
            payment_method=_id_of(payment_method),
            payment_method_options=payment_method_options,
            payment_method_types=payment_method_types,
            receipt_email=receipt_email,
            return_url=return_url,
            save_payment_method=save_payment_method,
            setup_future_usage=setup_future_usage,
            shipping=shipping,
            use_stripe_sdk=use_stripe_sdk,
        )
        return self._post(f"payment_intents/{payment_intent_id}/confirm", payment_intent)

    def capture_payment_intent(
        self,
        payment_intent_id: str,
        amount_to_capture: int | None = None,
        application_fee_amount: int | None = None,
        statement_descriptor: str | None = None,
        statement_descriptor_suffix: str | None = None,
        transfer_data: dict[str, Any] | None = None,
    ) -> PaymentIntent:
        """Capture the funds of an authorized payment intent."""
        validate_id("payment_intent", payment_intent_id)
        validate_statement_descriptor(statement_descriptor)

        payment_intent = PaymentIntent(
            amount_to_capture=amount_to_capture,
            application_fee_amount=application_fee_amount,
            statement_descriptor=statement_descriptor,
            statement_descriptor_suffix=statement_descriptor_suffix,
            transfer_data=transfer_data,
        )
        return self._post(f"payment_intents/{payment_intent_id}/capture", payment_intent)

    def cancel_payment_intent(
        self, payment_intent_id: str, cancellation_reason: str | None = None
    ) -> PaymentIntent:
        """Cancel a payment intent."""
        validate_id("payment_intent", payment_intent_id)
        validate_choice("cancellation_reason", cancellation_reason, CANCELLATION_REASONS)
        payment_intent = PaymentIntent(cancellation_reason=cancellation_reason)
        return self._post(f"payment_intents/{payment_intent_id}/cancel", payment_intent)

    def list_payment_intents(
        self,
        customer: IdOrObject | None = None,
        created: dict[str, int] | int | None = None,
        ending_before: str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Any:
        """List payment intents."""
        customer_id = _id_of(customer)
        if customer_id is not None:
            validate_id("customer", customer_id)
        return self._get_collections(
            "payment_intents",
            customer=customer_id,
            created=created,
            ending_before=ending_before,
            limit=limit,
            starting_after=starting_after,
        )

    # =========================================================================
    # Ephemeral keys
    # =========================================================================

    def create_ephemeral_key(self, customer: IdOrObject) -> EphemeralKey:
        """Issue an ephemeral key for a customer.

        Requires an explicit ``api_version`` on the client, which the key is
        bound to.
        """
        if self._config.api_version is None:
            raise StripeValidationError(
                "Ephemeral keys require an explicit api_version", param="api_version"
            )
        customer_id = validate_id("customer", _id_of(customer))
        return self._post("ephemeral_keys", EphemeralKey(customer=customer_id))

    def revoke_ephemeral_key(self, ephemeral_key: IdOrObject) -> EphemeralKey:
        """Revoke an ephemeral key before it expires."""
        return self._delete(f"ephemeral_keys/{_id_of(ephemeral_key)}")

    # =========================================================================
    # Request helpers
    # =========================================================================

    def _get(self, path: str, query: list[FormPair] | None = None) -> Any:
        return self._request("GET", path, query=query)

    def _delete(self, path: str, query: list[FormPair] | None = None) -> Any:
        return self._request("DELETE", path, query=query)

    def _post(self, path: str, obj: RequestBody = None) -> Any:
        if obj is None:
            body: list[FormPair] = []
        elif isinstance(obj, StripeObject):
            body = form_fields(obj)
        else:
            body = convert_to_form_fields(obj)
        return self._request("POST", path, body=body)

    def _get_collections(
        self,
        path: str,
        created: dict[str, int] | int | None = None,
        date: dict[str, int] | int | None = None,
        **filters: Any,
    ) -> Any:
        """GET a list endpoint.

        ``created`` and ``date`` may be plain values or range filters such as
        ``{"gte": 1397663381}``; other filters are sent in the order given.
        """
        query: list[FormPair] = []
        for name, value in filters.items():
            query.extend(encode_value(name, value))
        query.extend(range_filter_fields("created", created))
        query.extend(range_filter_fields("date", date))
        return self._get(path, query)

    def _request(
        self,
        method: str,
        path: str,
        query: list[FormPair] | None = None,
        body: list[FormPair] | None = None,
    ) -> Any:
        url = f"{self._api_base}/{path}"
        if query:
            url = f"{url}?{encode_form_body(query).decode('ascii')}"
        return self._make_request(method, url, body)

    def _make_request(self, method: str, url: str, body: list[FormPair] | None) -> Any:
        headers = {
            AUTHORIZATION_HEADER: basic_auth_header(self._config.api_key),
            USER_AGENT_HEADER: USER_AGENT,
        }
        if self._config.api_version is not None:
            headers[STRIPE_VERSION_HEADER] = self._config.api_version
        if method == "POST":
            headers[CONTENT_TYPE_HEADER] = FORM_CONTENT_TYPE

        if self._config.debug_network:
            logger.info("Sending to Stripe: %s %s body=%s", method, url, body or [])

        response = self._transport.send(method, url, headers, body if method == "POST" else None)

        if self._config.debug_network:
            logger.info("Received from Stripe: %s %s", response.status_line, response.text)

        try:
            if response.status_code == 200:
                return self._decode_success(response, url)
            raise self._decode_error(response)
        except StripeError as error:
            if self._config.debug:
                logger.warning("%s", error)
            raise

    def _decode_success(self, response: TransportResponse, url: str) -> Any:
        try:
            decoded = json.loads(response.content)
        except ValueError as exc:
            raise _undecodable(response, exc) from exc

        if isinstance(decoded, list):
            # API versions up to 2012-09-24 return some lists as bare arrays
            return self._materializer.materialize_array(decoded, url)
        if isinstance(decoded, dict):
            return self._materializer.materialize(decoded)
        raise ResponseDecodeError(
            type=HTTP_REQUEST_ERROR,
            message=f"Invalid object type returned: '{type(decoded).__name__}'",
            http_status=response.status_code,
            http_body=response.text,
        )

    def _decode_error(self, response: TransportResponse) -> APIError:
        status = response.status_code
        error_cls = ServerError if status >= 500 else APIError

        try:
            decoded = json.loads(response.content)
        except ValueError as exc:
            if status >= 500:
                return _server_error(response)
            return _undecodable(response, exc)

        fields = decoded.get("error") if isinstance(decoded, dict) else None
        if not isinstance(fields, dict) or not fields.get("type"):
            if status >= 500:
                return _server_error(response)
            return _undecodable(response, "missing error object")

        return error_cls(
            type=str(fields["type"]),
            message=str(fields.get("message", "")),
            code=_optional_str(fields.get("code")),
            param=_optional_str(fields.get("param")),
            http_status=status,
            http_body=response.text,
            json_body=decoded,
        )


# ============================================================================
# Helpers
# ============================================================================


def _id_of(value: Any) -> Any:
    """Reduce an object to its id; strings and None pass through."""
    if isinstance(value, StripeObject):
        return value.id
    return value


def _escape(value: str) -> str:
    return quote(value, safe="")


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _undecodable(response: TransportResponse, reason: Any) -> ResponseDecodeError:
    return ResponseDecodeError(
        type=f"{DECODE_ERROR_PREFIX}: {reason}",
        message=f"{response.status_line} - {response.text}",
        http_status=response.status_code,
        http_body=response.text,
    )


def _server_error(response: TransportResponse) -> ServerError:
    return ServerError(
        type=HTTP_REQUEST_ERROR,
        message=f"{response.status_line} - {response.text}",
        code=str(response.status_code),
        http_status=response.status_code,
        http_body=response.text,
    )
