"""ResponseMaterializer - turns decoded JSON into typed Stripe objects.

Maps carrying an ``object`` discriminator are rebuilt depth first: nested
values are materialized before the enclosing object is constructed, and
wire booleans are normalized on the way. Maps with an unknown or missing
discriminator are kept as plain dicts.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

from .errors import StripeError
from .registry import DEFAULT_REGISTRY, LIST_OBJECT, ObjectRegistry
from .schemas import StripeList, StripeObject, is_wire_boolean

COERCION_ERROR = "object coercion error"

# Fields that very old API versions returned as bare arrays on customer-owned objects
LEGACY_ARRAY_FIELDS = ("cards", "subscriptions")


class ResponseMaterializer:
    """Builds the typed object graph for a decoded response.

    Materializing is side-effect free and idempotent: already materialized
    objects are returned unchanged.
    """

    def __init__(self, registry: ObjectRegistry | None = None) -> None:
        self._registry = registry or DEFAULT_REGISTRY

    @property
    def registry(self) -> ObjectRegistry:
        return self._registry

    def materialize(self, value: Any) -> Any:
        """Materialize any decoded JSON value.

        Args:
            value: A map, array, scalar or boolean (native or boxed).

        Returns:
            A StripeObject or StripeList for recognized maps, a plain dict for
            other maps, a list for arrays, and scalars unchanged.

        Raises:
            StripeError: If a legacy wire shape cannot be coerced.
            pydantic.ValidationError: If a recognized object has invalid fields.
        """
        if isinstance(value, (StripeObject, StripeList)):
            return value
        if is_wire_boolean(value):
            return bool(value)
        if isinstance(value, Mapping):
            return self._materialize_mapping(value)
        if isinstance(value, list):
            return [self.materialize(item) for item in value]
        return value

    def materialize_array(self, array: list[Any], url: str) -> StripeList:
        """Materialize a top-level array response as a single page.

        The list url is the request url without scheme, host or query, which
        is what the API reports for lists it builds itself.
        """
        return self.materialize({**_array_to_list(array), "url": urlsplit(url).path})

    def _materialize_mapping(self, value: Mapping[str, Any]) -> Any:
        data = dict(value)
        object_name = data.get("object")

        # Deletion acknowledgements are not full resources, except for customers
        if "deleted" in data and object_name is not None and object_name != "customer":
            del data["object"]
            object_name = None

        _coerce_legacy_arrays(data)
        _coerce_legacy_invoice_lines(data)

        data = {key: self.materialize(item) for key, item in data.items()}

        if not isinstance(object_name, str):
            return data

        object_type = self._registry.lookup(object_name)
        if object_type is None:
            return data
        return object_type.model_validate(data)


DEFAULT_MATERIALIZER = ResponseMaterializer()


def materialize(value: Any, registry: ObjectRegistry | None = None) -> Any:
    """Materialize value with the given registry (or the default one)."""
    if registry is None:
        return DEFAULT_MATERIALIZER.materialize(value)
    return ResponseMaterializer(registry).materialize(value)


# ============================================================================
# Legacy wire shapes
# ============================================================================


def _array_to_list(array: list[Any]) -> dict[str, Any]:
    count = len(array)
    return {
        "object": LIST_OBJECT,
        "count": count,
        "has_more": False,
        "data": list(array),
        "total_count": count,
    }


def _coerce_legacy_arrays(data: dict[str, Any]) -> None:
    for field in LEGACY_ARRAY_FIELDS:
        if not isinstance(data.get(field), list):
            continue

        if data.get("object") == "customer" and data.get("id"):
            customer_id = data["id"]
        else:
            customer_id = data.get("customer")

        if not customer_id:
            raise StripeError(
                type=COERCION_ERROR,
                message=f"Could not determine customer id while coercing {field} list "
                "into a StripeList.",
            )

        data[field] = {
            **_array_to_list(data[field]),
            "url": f"/v1/customers/{customer_id}/{field}",
        }


def _coerce_legacy_invoice_lines(data: dict[str, Any]) -> None:
    lines = data.get("lines")
    if data.get("object") != "invoice" or not isinstance(lines, Mapping) or "object" in lines:
        return

    items: list[Any] = []
    for key in sorted(lines):
        group = lines[key]
        if not isinstance(group, list):
            raise StripeError(
                type=COERCION_ERROR,
                message=f"Found invalid subkey type '{type(group).__name__}' while coercing "
                "invoice lines into a StripeList.",
            )
        items.extend(group)

    customer_id = data.get("customer")
    if not customer_id:
        raise StripeError(
            type=COERCION_ERROR,
            message="Could not determine customer id while coercing invoice lines "
            "into a StripeList.",
        )

    data["lines"] = {
        **_array_to_list(items),
        "url": f"/v1/invoices/upcoming/lines?customer={customer_id}",
    }
