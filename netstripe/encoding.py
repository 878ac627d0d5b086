"""Form encoding of Stripe objects and the base64 helpers used for auth.

The API takes ``application/x-www-form-urlencoded`` bodies in which nested
values use bracket notation: ``metadata[order_id]=42``,
``card[exp_month]=12``, ``payment_method_types[]=card``.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any, Iterable, Union

from .constants import RANGE_OPERATORS
from .schemas import CLEARABLE, InlineObject, RawId, StripeList, StripeObject, TokenReference

FormPair = tuple[str, Any]


# ============================================================================
# Base64
# ============================================================================


def safe_base64_encode(data: Union[str, bytes]) -> str:
    """Safely encode string or bytes to base64 string.

    Args:
        data: String or bytes to encode

    Returns:
        Base64 encoded string
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("utf-8")


def basic_auth_header(api_key: str) -> str:
    """Authorization header value: the API key as user name, empty password."""
    return "Basic " + safe_base64_encode(f"{api_key}:")


# ============================================================================
# Form encoding
# ============================================================================


def form_fields(resource: StripeObject, fields: Iterable[str] | None = None) -> list[FormPair]:
    """Encode a resource's submittable fields as ordered form pairs.

    Args:
        resource: Object to encode.
        fields: Field names to encode, in order. Defaults to the resource's
            own whitelist.

    Returns:
        Ordered (key, value) pairs. Keys may repeat; array values are left
        for the transport to expand.

    Example:
        ```python
        form_fields(Charge(amount=100, currency="usd", metadata={"b": "2", "a": "1"}))
        # [("amount", "100"), ("currency", "usd"),
        #  ("metadata[a]", "1"), ("metadata[b]", "2")]
        ```
    """
    names = resource.form_field_names() if fields is None else tuple(fields)
    pairs: list[FormPair] = []
    for name in names:
        value = getattr(resource, name, None)
        pairs.extend(encode_value(name, value, clearable=_is_clearable(resource, name)))
    return pairs


def convert_to_form_fields(fields: Mapping[str, Any]) -> list[FormPair]:
    """Encode an ad hoc mapping of request arguments, in mapping order."""
    pairs: list[FormPair] = []
    for name, value in fields.items():
        pairs.extend(encode_value(name, value))
    return pairs


def encode_value(key: str, value: Any, clearable: bool = False) -> list[FormPair]:
    """Encode one value under key.

    Args:
        key: Form key, possibly already bracketed.
        value: Value to encode.
        clearable: Whether an empty value is meaningful (clears the field).

    Returns:
        The pairs for this value; empty when the value is unset.
    """
    if value is None:
        return []
    if isinstance(value, bool):
        return [(key, "true" if value else "false")]
    if isinstance(value, (RawId, TokenReference)):
        return [(key, value.id)]
    if isinstance(value, InlineObject):
        if value.id is not None and not value.is_new:
            return [(key, value.id)]
        return _nest(key, form_fields(value.resource))
    if isinstance(value, StripeObject):
        if value.id is not None:
            return [(key, value.id)]
        return _nest(key, form_fields(value))
    if isinstance(value, StripeList):
        raise TypeError(f"Cannot transform a list into form fields (field '{key}')")
    if isinstance(value, Mapping):
        if not value:
            return [(key, "")] if clearable else []
        pairs: list[FormPair] = []
        for sub_key in sorted(value, key=str):
            pairs.extend(encode_value(f"{key}[{sub_key}]", value[sub_key]))
        return pairs
    if isinstance(value, (list, tuple)):
        return [(f"{key}[]", list(value))]
    if value == "" and not clearable:
        return []
    return [(key, str(value))]


def range_filter_fields(name: str, value: Any) -> list[FormPair]:
    """Encode a range filter such as ``created={"gte": 1397663381}``.

    A plain value is sent as ``name=value``; in a mapping only the gt, gte,
    lt and lte operators are kept.
    """
    if value is None:
        return []
    if not isinstance(value, Mapping):
        return encode_value(name, value)
    return [
        (f"{name}[{operator}]", str(value[operator]))
        for operator in sorted(value)
        if operator in RANGE_OPERATORS
    ]


def _nest(key: str, pairs: list[FormPair]) -> list[FormPair]:
    nested = []
    for sub_key, sub_value in pairs:
        head, bracket, rest = sub_key.partition("[")
        nested.append((f"{key}[{head}]{bracket}{rest}", sub_value))
    return nested


def _is_clearable(resource: StripeObject, name: str) -> bool:
    field = type(resource).model_fields.get(name)
    return field is not None and CLEARABLE in field.metadata
