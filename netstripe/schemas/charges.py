"""Money movement: charges, refunds, balances and payment intents."""

from __future__ import annotations

from typing import Any, ClassVar, Optional

from .base import ClearableMetadata, Metadata, StripeObject, WireBool
from .cards import CardReference
from .lists import list_of


class Refund(StripeObject):
    OBJECT: ClassVar[str] = "refund"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "amount",
        "metadata",
        "reason",
        "refund_application_fee",
    )

    amount: Optional[int] = None
    balance_transaction: Optional[str] = None
    charge: Optional[str] = None
    created: Optional[int] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    metadata: Metadata = None
    reason: Optional[str] = None
    receipt_number: Optional[str] = None
    status: Optional[str] = None

    # Create only
    refund_application_fee: Optional[WireBool] = None


RefundList = list_of(Refund)


class Charge(StripeObject):
    OBJECT: ClassVar[str] = "charge"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "amount",
        "currency",
        "customer",
        "card",
        "description",
        "metadata",
        "capture",
        "statement_descriptor",
        "application_fee",
        "receipt_email",
    )

    amount: Optional[int] = None
    currency: Optional[str] = None
    customer: Optional[str] = None
    card: CardReference = None  # type: ignore[valid-type]
    description: Optional[str] = None
    metadata: Metadata = None
    capture: Optional[WireBool] = None
    statement_descriptor: Optional[str] = None
    application_fee: Optional[int] = None
    receipt_email: Optional[str] = None

    # Returned by the API
    amount_refunded: Optional[int] = None
    balance_transaction: Optional[str] = None
    captured: Optional[WireBool] = None
    created: Optional[int] = None
    failure_code: Optional[str] = None
    failure_message: Optional[str] = None
    fee: Optional[int] = None
    invoice: Optional[str] = None
    livemode: Optional[WireBool] = None
    paid: Optional[WireBool] = None
    refunded: Optional[WireBool] = None
    refunds: RefundList = None  # type: ignore[valid-type]
    status: Optional[str] = None


ChargeList = list_of(Charge)


class BalanceTransaction(StripeObject):
    OBJECT: ClassVar[str] = "balance_transaction"

    amount: Optional[int] = None
    available_on: Optional[int] = None
    created: Optional[int] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    fee: Optional[int] = None
    fee_details: Optional[list[dict[str, Any]]] = None
    net: Optional[int] = None
    source: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None


class Balance(StripeObject):
    OBJECT: ClassVar[str] = "balance"

    available: Optional[list[dict[str, Any]]] = None
    connect_reserved: Optional[list[dict[str, Any]]] = None
    livemode: Optional[WireBool] = None
    pending: Optional[list[dict[str, Any]]] = None


class PaymentIntent(StripeObject):
    OBJECT: ClassVar[str] = "payment_intent"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "amount",
        "amount_to_capture",
        "application_fee_amount",
        "cancellation_reason",
        "capture_method",
        "client_secret",
        "confirm",
        "confirmation_method",
        "currency",
        "customer",
        "description",
        "error_on_requires_action",
        "mandate",
        "mandate_data",
        "metadata",
        "off_session",
        "on_behalf_of",
        "payment_method",
        "payment_method_options",
        "payment_method_types",
        "receipt_email",
        "return_url",
        "save_payment_method",
        "setup_future_usage",
        "shipping",
        "statement_descriptor",
        "statement_descriptor_suffix",
        "transfer_data",
        "transfer_group",
        "use_stripe_sdk",
    )

    # Args for posting to PaymentIntent endpoints
    amount: Optional[int] = None
    amount_to_capture: Optional[int] = None
    application_fee_amount: Optional[int] = None
    cancellation_reason: Optional[str] = None
    capture_method: Optional[str] = None
    client_secret: Optional[str] = None
    confirm: Optional[WireBool] = None
    confirmation_method: Optional[str] = None
    currency: Optional[str] = None
    customer: Optional[str] = None
    description: Optional[str] = None
    error_on_requires_action: Optional[WireBool] = None
    mandate: Optional[str] = None
    mandate_data: Optional[dict[str, Any]] = None
    metadata: ClearableMetadata = None
    off_session: Optional[WireBool] = None
    on_behalf_of: Optional[str] = None
    payment_method: Optional[str] = None
    payment_method_options: Optional[dict[str, Any]] = None
    payment_method_types: Optional[list[str]] = None
    receipt_email: Optional[str] = None
    return_url: Optional[str] = None
    save_payment_method: Optional[WireBool] = None
    setup_future_usage: Optional[str] = None
    shipping: Optional[dict[str, Any]] = None
    statement_descriptor: Optional[str] = None
    statement_descriptor_suffix: Optional[str] = None
    transfer_data: Optional[dict[str, Any]] = None
    transfer_group: Optional[str] = None
    use_stripe_sdk: Optional[WireBool] = None

    # Args returned by the API
    amount_capturable: Optional[int] = None
    amount_received: Optional[int] = None
    application: Optional[str] = None
    canceled_at: Optional[int] = None
    charges: ChargeList = None  # type: ignore[valid-type]
    created: Optional[int] = None
    invoice: Optional[str] = None
    last_payment_error: Optional[dict[str, Any]] = None
    livemode: Optional[WireBool] = None
    next_action: Optional[dict[str, Any]] = None
    review: Optional[str] = None
    status: Optional[str] = None
