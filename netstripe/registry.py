"""ObjectRegistry - lookup from wire discriminator to resource type."""

from __future__ import annotations

from typing import Union

from typing_extensions import Self

from .schemas import (
    Balance,
    BalanceTransaction,
    Card,
    Charge,
    Coupon,
    Customer,
    Discount,
    EphemeralKey,
    Invoice,
    InvoiceItem,
    LineItem,
    PaymentIntent,
    PaymentMethod,
    Plan,
    Product,
    Refund,
    Source,
    StripeList,
    StripeObject,
    Subscription,
    Token,
)

LIST_OBJECT = StripeList.OBJECT

ObjectType = Union[type[StripeObject], type[StripeList]]

# Every resource type the client decodes, registered once at import
RESOURCE_TYPES: tuple[type[StripeObject], ...] = (
    Balance,
    BalanceTransaction,
    Card,
    Charge,
    Coupon,
    Customer,
    Discount,
    EphemeralKey,
    Invoice,
    InvoiceItem,
    LineItem,
    PaymentIntent,
    PaymentMethod,
    Plan,
    Product,
    Refund,
    Source,
    Subscription,
    Token,
)


class ObjectRegistry:
    """Maps a discriminator such as ``"customer"`` to the class that models it.

    Looking up an unknown discriminator is not an error: it returns None and
    the caller keeps the object as a plain map. ``"list"`` always resolves
    to StripeList.
    """

    def __init__(self) -> None:
        self._types: dict[str, type[StripeObject]] = {}

    def register(self, resource_cls: type[StripeObject]) -> Self:
        """Register a resource type under its ``OBJECT`` discriminator.

        Args:
            resource_cls: StripeObject subclass to register.

        Returns:
            Self for chaining.

        Raises:
            ValueError: If the discriminator is empty, reserved or taken.
        """
        name = resource_cls.OBJECT
        if not name:
            raise ValueError(f"{resource_cls.__name__} does not declare an OBJECT discriminator")
        if name == LIST_OBJECT:
            raise ValueError(f"Object type '{LIST_OBJECT}' is reserved for lists")
        if name in self._types:
            raise ValueError(
                f"Object type '{name}' is already registered to {self._types[name].__name__}"
            )
        self._types[name] = resource_cls
        return self

    def lookup(self, object_name: str) -> ObjectType | None:
        """Return the class for a discriminator, or None when it is not modeled."""
        if object_name == LIST_OBJECT:
            return StripeList
        return self._types.get(object_name)

    def __contains__(self, object_name: object) -> bool:
        return object_name == LIST_OBJECT or object_name in self._types

    @property
    def object_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._types))


def _build_default_registry() -> ObjectRegistry:
    registry = ObjectRegistry()
    for resource_cls in RESOURCE_TYPES:
        registry.register(resource_cls)
    return registry


DEFAULT_REGISTRY = _build_default_registry()
