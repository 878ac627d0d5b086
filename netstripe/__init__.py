"""netstripe - typed Python client for the Stripe REST API.

Requests are form encoded from typed resources, and JSON responses are
materialized back into typed resources and cursor-paginated lists.

Quick Start:
    ```python
    from netstripe import StripeClient, StripeConfig

    stripe = StripeClient(StripeConfig(api_key="sk_test_123", api_version="2019-12-03"))

    customer = stripe.post_customer(email="jane@example.com", metadata={"order": "42"})
    page = stripe.get_customers(limit=10, created={"gte": 1397663381})
    if page.has_more:
        page = stripe.get_customers(limit=10, **page.next_page_args())
    ```
"""

# Client
from .client import StripeClient, StripeConfig
from .constants import DEFAULT_API_BASE, MAX_API_VERSION, MIN_API_VERSION, __version__

# Core engine
from .encoding import (
    basic_auth_header,
    convert_to_form_fields,
    encode_value,
    form_fields,
    range_filter_fields,
)
from .materialize import ResponseMaterializer, materialize
from .registry import DEFAULT_REGISTRY, ObjectRegistry

# Errors
from .errors import (
    APIError,
    ResponseDecodeError,
    ServerError,
    StripeError,
    StripeValidationError,
)

# Transports
from .http import HttpxTransport, RequestsTransport, Transport, TransportResponse

# Resources
from .schemas import (
    Balance,
    BalanceTransaction,
    Card,
    Charge,
    Coupon,
    Customer,
    Discount,
    EphemeralKey,
    InlineObject,
    Invoice,
    InvoiceItem,
    LineItem,
    PaymentIntent,
    PaymentMethod,
    Plan,
    Product,
    RawId,
    Refund,
    Source,
    StripeList,
    StripeObject,
    Subscription,
    Token,
    TokenReference,
    inline,
)

__all__ = [
    # Version
    "__version__",
    "DEFAULT_API_BASE",
    "MIN_API_VERSION",
    "MAX_API_VERSION",
    # Client
    "StripeClient",
    "StripeConfig",
    # Core engine
    "form_fields",
    "convert_to_form_fields",
    "encode_value",
    "range_filter_fields",
    "basic_auth_header",
    "ObjectRegistry",
    "DEFAULT_REGISTRY",
    "ResponseMaterializer",
    "materialize",
    # Errors
    "StripeError",
    "StripeValidationError",
    "APIError",
    "ServerError",
    "ResponseDecodeError",
    # Transports
    "Transport",
    "TransportResponse",
    "HttpxTransport",
    "RequestsTransport",
    # Types - Base
    "StripeObject",
    "StripeList",
    "RawId",
    "TokenReference",
    "InlineObject",
    "inline",
    # Types - Resources
    "Balance",
    "BalanceTransaction",
    "Card",
    "Charge",
    "Coupon",
    "Customer",
    "Discount",
    "EphemeralKey",
    "Invoice",
    "InvoiceItem",
    "LineItem",
    "PaymentIntent",
    "PaymentMethod",
    "Plan",
    "Product",
    "Refund",
    "Source",
    "Subscription",
    "Token",
]
