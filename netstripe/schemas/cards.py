"""Payment instruments: cards, tokens, sources and payment methods."""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Union

from .base import ClearableMetadata, Metadata, StripeObject, WireBool, reference_to


class Card(StripeObject):
    """A card, either submitted inline or returned by the API."""

    OBJECT: ClassVar[str] = "card"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "number",
        "cvc",
        "name",
        "address_line1",
        "address_line2",
        "address_city",
        "address_zip",
        "address_state",
        "address_country",
        "exp_month",
        "exp_year",
        "metadata",
    )

    # Input fields
    number: Optional[str] = None
    cvc: Optional[Union[int, str]] = None
    name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    address_city: Optional[str] = None
    address_zip: Optional[str] = None
    address_state: Optional[str] = None
    address_country: Optional[str] = None

    # Both input and output
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    metadata: Metadata = None

    # Output fields
    brand: Optional[str] = None
    country: Optional[str] = None
    customer: Optional[str] = None
    cvc_check: Optional[str] = None
    address_line1_check: Optional[str] = None
    address_zip_check: Optional[str] = None
    fingerprint: Optional[str] = None
    funding: Optional[str] = None
    last4: Optional[str] = None
    type: Optional[str] = None


CardReference = reference_to(Card, tokens=True)

InlineCard = reference_to(Card)


class Token(StripeObject):
    OBJECT: ClassVar[str] = "token"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = ("card", "amount", "currency")

    # Args for creating a Token
    card: InlineCard = None  # type: ignore[valid-type]
    amount: Optional[int] = None
    currency: Optional[str] = None

    # Args returned by the API
    bank_account: Optional[dict[str, Any]] = None
    client_ip: Optional[str] = None
    created: Optional[int] = None
    livemode: Optional[WireBool] = None
    type: Optional[str] = None
    used: Optional[WireBool] = None


class Source(StripeObject):
    OBJECT: ClassVar[str] = "source"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "amount",
        "currency",
        "flow",
        "mandate",
        "metadata",
        "owner",
        "receiver",
        "redirect",
        "source_order",
        "statement_descriptor",
        "token",
        "type",
        "usage",
    )

    # Object creation
    amount: Optional[int] = None
    currency: Optional[str] = None
    flow: Optional[str] = None
    mandate: Optional[dict[str, Any]] = None
    metadata: ClearableMetadata = None
    owner: Optional[dict[str, Any]] = None
    receiver: Optional[dict[str, Any]] = None
    redirect: Optional[dict[str, Any]] = None
    source_order: Optional[dict[str, Any]] = None
    statement_descriptor: Optional[str] = None
    token: Optional[str] = None
    type: Optional[str] = None
    usage: Optional[str] = None

    # API response
    client_secret: Optional[str] = None
    created: Optional[int] = None
    customer: Optional[str] = None
    livemode: Optional[WireBool] = None
    status: Optional[str] = None
    card: Optional[Card] = None


class PaymentMethod(StripeObject):
    OBJECT: ClassVar[str] = "payment_method"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "billing_details",
        "card",
        "customer",
        "fpx",
        "ideal",
        "metadata",
        "sepa_debit",
        "type",
    )

    # Args for posting to PaymentMethod endpoints
    billing_details: Optional[dict[str, Any]] = None
    card: CardReference = None  # type: ignore[valid-type]
    fpx: Optional[dict[str, Any]] = None
    ideal: Optional[dict[str, Any]] = None
    metadata: ClearableMetadata = None
    sepa_debit: Optional[dict[str, Any]] = None
    type: Optional[str] = None

    # Args returned by the API
    card_present: Optional[dict[str, Any]] = None
    created: Optional[int] = None
    customer: Optional[str] = None
    livemode: Optional[WireBool] = None
