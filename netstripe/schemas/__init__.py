"""Typed Stripe resources."""

from .base import (
    CLEARABLE,
    ClearableMetadata,
    InlineObject,
    Metadata,
    RawId,
    Reference,
    StripeObject,
    TokenReference,
    WireBool,
    coerce_wire_bool,
    inline,
    is_wire_boolean,
    reference_to,
)
from .billing import (
    Coupon,
    Discount,
    Invoice,
    InvoiceItem,
    LineItem,
    Plan,
    Product,
    Subscription,
)
from .cards import Card, PaymentMethod, Source, Token
from .charges import Balance, BalanceTransaction, Charge, PaymentIntent, Refund
from .customers import Customer, EphemeralKey
from .lists import StripeList, list_of

__all__ = [
    # Base
    "CLEARABLE",
    "ClearableMetadata",
    "Metadata",
    "StripeObject",
    "WireBool",
    "coerce_wire_bool",
    "is_wire_boolean",
    # References
    "InlineObject",
    "RawId",
    "Reference",
    "TokenReference",
    "inline",
    "reference_to",
    # Lists
    "StripeList",
    "list_of",
    # Resources
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
