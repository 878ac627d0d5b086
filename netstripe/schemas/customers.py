"""Customers and the ephemeral keys issued for them."""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Union

from .base import Metadata, StripeObject, WireBool
from .billing import CouponReference, Discount, PlanReference, Subscription
from .cards import Card, CardReference
from .lists import StripeList, list_of

CardList = list_of(Card)

SubscriptionList = list_of(Subscription)


class Customer(StripeObject):
    """A customer.

    ``balance``, ``default_source`` and ``sources`` are the canonical
    fields; the older names ``account_balance``, ``default_card`` and
    ``cards`` (and ``card`` for ``source``) are accepted on input and exposed
    as read-only aliases.
    """

    OBJECT: ClassVar[str] = "customer"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = (
        "balance",
        "source",
        "coupon",
        "default_source",
        "description",
        "email",
        "metadata",
        "plan",
        "quantity",
        "trial_end",
    )
    ALIASES: ClassVar[dict[str, str]] = {
        "account_balance": "balance",
        "card": "source",
        "cards": "sources",
        "default_card": "default_source",
    }

    # Customer creation args
    balance: Optional[int] = None
    source: CardReference = None  # type: ignore[valid-type]
    coupon: CouponReference = None  # type: ignore[valid-type]
    default_source: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    metadata: Metadata = None
    plan: PlanReference = None  # type: ignore[valid-type]
    quantity: Optional[int] = None
    trial_end: Optional[Union[int, str]] = None

    # API object args
    created: Optional[int] = None
    currency: Optional[str] = None
    deleted: Optional[WireBool] = None
    delinquent: Optional[WireBool] = None
    discount: Optional[Discount] = None
    livemode: Optional[WireBool] = None
    sources: CardList = None  # type: ignore[valid-type]
    subscriptions: SubscriptionList = None  # type: ignore[valid-type]

    @property
    def account_balance(self) -> int | None:
        return self.balance

    @property
    def default_card(self) -> str | None:
        return self.default_source

    @property
    def cards(self) -> StripeList | None:
        return self.sources

    @property
    def subscription(self) -> Subscription | None:
        """The customer's current subscription: the first of ``subscriptions``."""
        if not self.subscriptions:
            return None
        return self.subscriptions.first()


class EphemeralKey(StripeObject):
    OBJECT: ClassVar[str] = "ephemeral_key"
    FORM_FIELDS: ClassVar[tuple[str, ...]] = ("customer",)

    # Input fields
    customer: Optional[str] = None

    # Output fields
    associated_objects: Optional[list[dict[str, Any]]] = None
    created: Optional[int] = None
    expires: Optional[int] = None
    livemode: Optional[WireBool] = None
    secret: Optional[str] = None
