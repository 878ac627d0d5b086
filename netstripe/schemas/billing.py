"""Recurring billing: plans, coupons, subscriptions, invoices and products."""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Union

from .base import ClearableMetadata, Metadata, StripeObject, WireBool, reference_to
from .cards import CardReference
from .lists import list_of


class Product(StripeObject):
    OBJECT: ClassVar[str] = "product"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "active",
        "attributes",
        "caption",
        "deactivate_on",
        "description",
        "id",
        "images",
        "metadata",
        "name",
        "package_dimensions",
        "shippable",
        "statement_descriptor",
        "type",
        "unit_label",
        "url",
    )

    # Object creation
    active: Optional[WireBool] = None
    attributes: Optional[list[str]] = None
    caption: Optional[str] = None
    deactivate_on: Optional[list[str]] = None
    description: Optional[str] = None
    images: Optional[list[str]] = None
    metadata: ClearableMetadata = None
    name: Optional[str] = None
    package_dimensions: Optional[dict[str, float]] = None
    shippable: Optional[WireBool] = None
    statement_descriptor: Optional[str] = None
    type: Optional[str] = None
    unit_label: Optional[str] = None
    url: Optional[str] = None

    # API response
    created: Optional[int] = None
    livemode: Optional[WireBool] = None
    updated: Optional[int] = None


class Plan(StripeObject):
    OBJECT: ClassVar[str] = "plan"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "id",
        "amount",
        "currency",
        "interval",
        "interval_count",
        "name",
        "trial_period_days",
        "metadata",
        "statement_descriptor",
    )

    amount: Optional[int] = None
    currency: Optional[str] = None
    interval: Optional[str] = None
    interval_count: Optional[int] = None
    name: Optional[str] = None
    trial_period_days: Optional[int] = None
    metadata: Metadata = None
    statement_descriptor: Optional[str] = None

    active: Optional[WireBool] = None
    created: Optional[int] = None
    livemode: Optional[WireBool] = None
    nickname: Optional[str] = None
    product: Optional[Union[str, Product]] = None


PlanReference = reference_to(Plan)


class Coupon(StripeObject):
    OBJECT: ClassVar[str] = "coupon"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "id",
        "percent_off",
        "amount_off",
        "currency",
        "duration",
        "duration_in_months",
        "max_redemptions",
        "metadata",
        "redeem_by",
    )

    percent_off: Optional[float] = None
    amount_off: Optional[int] = None
    currency: Optional[str] = None
    duration: Optional[str] = None
    duration_in_months: Optional[int] = None
    max_redemptions: Optional[int] = None
    metadata: Metadata = None
    redeem_by: Optional[int] = None

    created: Optional[int] = None
    livemode: Optional[WireBool] = None
    times_redeemed: Optional[int] = None
    valid: Optional[WireBool] = None


CouponReference = reference_to(Coupon)


class Discount(StripeObject):
    OBJECT: ClassVar[str] = "discount"

    coupon: Optional[Coupon] = None
    customer: Optional[str] = None
    end: Optional[int] = None
    start: Optional[int] = None
    subscription: Optional[str] = None


class Subscription(StripeObject):
    OBJECT: ClassVar[str] = "subscription"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "card",
        "plan",
        "coupon",
        "prorate",
        "trial_end",
        "quantity",
        "application_fee_percent",
        "metadata",
    )

    card: CardReference = None  # type: ignore[valid-type]
    plan: PlanReference = None  # type: ignore[valid-type]
    coupon: CouponReference = None  # type: ignore[valid-type]
    prorate: Optional[WireBool] = None
    # An epoch timestamp or the literal "now"
    trial_end: Optional[Union[int, str]] = None
    quantity: Optional[int] = None
    application_fee_percent: Optional[float] = None
    metadata: Metadata = None

    # Other fields returned by the API
    cancel_at_period_end: Optional[WireBool] = None
    canceled_at: Optional[int] = None
    current_period_end: Optional[int] = None
    current_period_start: Optional[int] = None
    customer: Optional[str] = None
    discount: Optional[Discount] = None
    ended_at: Optional[int] = None
    livemode: Optional[WireBool] = None
    start: Optional[int] = None
    status: Optional[str] = None
    trial_start: Optional[int] = None


class LineItem(StripeObject):
    OBJECT: ClassVar[str] = "line_item"

    amount: Optional[int] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    livemode: Optional[WireBool] = None
    metadata: Metadata = None
    period: Optional[dict[str, Any]] = None
    plan: Optional[Plan] = None
    proration: Optional[WireBool] = None
    quantity: Optional[int] = None
    subscription: Optional[str] = None
    type: Optional[str] = None


LineItemList = list_of(LineItem)


class InvoiceItem(StripeObject):
    OBJECT: ClassVar[str] = "invoiceitem"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "amount",
        "currency",
        "description",
        "metadata",
        "invoice",
        "subscription",
        "customer",
    )

    customer: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    invoice: Optional[str] = None
    subscription: Optional[str] = None
    metadata: Metadata = None

    date: Optional[int] = None
    livemode: Optional[WireBool] = None
    proration: Optional[WireBool] = None

    def form_field_names(self) -> tuple[str, ...]:
        # The owning customer cannot change once the item exists
        if self.id is not None:
            return tuple(name for name in self.FORM_FIELDS if name != "customer")
        return self.FORM_FIELDS


class Invoice(StripeObject):
    OBJECT: ClassVar[str] = "invoice"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "customer",
        "subscription",
        "application_fee",
        "closed",
        "description",
        "metadata",
    )

    customer: Optional[str] = None
    subscription: Optional[str] = None
    application_fee: Optional[int] = None
    closed: Optional[WireBool] = None
    description: Optional[str] = None
    metadata: Metadata = None

    amount_due: Optional[int] = None
    attempt_count: Optional[int] = None
    attempted: Optional[WireBool] = None
    charge: Optional[str] = None
    created: Optional[int] = None
    currency: Optional[str] = None
    date: Optional[int] = None
    discount: Optional[Discount] = None
    ending_balance: Optional[int] = None
    lines: LineItemList = None  # type: ignore[valid-type]
    livemode: Optional[WireBool] = None
    next_payment_attempt: Optional[int] = None
    paid: Optional[WireBool] = None
    period_end: Optional[int] = None
    period_start: Optional[int] = None
    starting_balance: Optional[int] = None
    subtotal: Optional[int] = None
    total: Optional[int] = None

    @property
    def invoiceitems(self) -> list[Any]:
        """Lines that are invoice items."""
        return [line for line in self.lines or () if _line_type(line) == "invoiceitem"]

    @property
    def subscriptions(self) -> list[Any]:
        """Lines that are subscriptions."""
        return [line for line in self.lines or () if _line_type(line) == "subscription"]


def _line_type(line: Any) -> str | None:
    if isinstance(line, LineItem):
        return line.type
    if isinstance(line, StripeObject):
        return line.OBJECT
    if isinstance(line, dict):
        return line.get("type") or line.get("object")
    return None
