"""Local value checks run before any request is sent."""

from __future__ import annotations

import re
from typing import Any, Iterable

from .constants import MAX_API_VERSION, MIN_API_VERSION
from .errors import StripeValidationError

# Identifier prefixes, keyed by the kind of object they identify
ID_PREFIXES: dict[str, str] = {
    "card": "card_",
    "customer": "cus_",
    "payment_intent": "pi_",
    "payment_method": "pm_",
    "product": "prod_",
    "source": "src_",
    "token": "tok_",
}

API_VERSION_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

# Statement descriptors may not contain <, >, " or '
STATEMENT_DESCRIPTOR_PATTERN = re.compile(r"[^<>\"']{0,22}")

SOURCE_TYPES = ("ach_credit_transfer", "card")
SOURCE_USAGES = ("reusable", "single_use")
SOURCE_FLOWS = ("redirect", "receiver", "code_verification", "none")
PRODUCT_TYPES = ("good", "service")
PAYMENT_METHOD_TYPES = ("card", "sepa_debit", "ideal")
CAPTURE_METHODS = ("automatic", "manual")
CONFIRMATION_METHODS = ("automatic", "manual")
CANCELLATION_REASONS = ("duplicate", "fraudulent", "requested_by_customer", "abandoned")
SETUP_FUTURE_USAGES = ("on_session", "off_session")


def is_valid_id(kind: str, value: Any) -> bool:
    """Check that value is an identifier string for the given kind.

    Args:
        kind: Key of ID_PREFIXES, e.g. "customer".
        value: Candidate identifier.

    Returns:
        True if value is a string of the form ``<prefix>.+``.
    """
    prefix = ID_PREFIXES[kind]
    return isinstance(value, str) and len(value) > len(prefix) and value.startswith(prefix)


def validate_id(kind: str, value: Any, param: str | None = None) -> str:
    """Return value unchanged, or raise if it is not an identifier of kind."""
    if not is_valid_id(kind, value):
        prefix = ID_PREFIXES[kind]
        raise StripeValidationError(
            f"Value '{value}' must be a {kind.replace('_', ' ')} id string "
            f"of the form {prefix}.+",
            param=param or kind,
        )
    return value


def validate_choice(param: str, value: Any, choices: Iterable[str]) -> Any:
    """Raise unless value is None or one of choices."""
    choices = tuple(choices)
    if value is not None and value not in choices:
        raise StripeValidationError(
            f"Value '{value}' for '{param}' must be one of {', '.join(choices)}",
            param=param,
        )
    return value


def validate_choices(param: str, values: Iterable[str] | None, choices: Iterable[str]) -> Any:
    """Apply validate_choice to every element of values."""
    if values is None:
        return None
    choices = tuple(choices)
    for value in values:
        validate_choice(param, value, choices)
    return values


def validate_api_version(version: str) -> str:
    """Check an API version string is well formed and within the supported range."""
    if not isinstance(version, str) or not API_VERSION_PATTERN.fullmatch(version):
        raise StripeValidationError(
            f"Value '{version}' must be a Stripe API version string of the form yyyy-mm-dd",
            param="api_version",
        )
    # ISO dates compare correctly as strings
    if version < MIN_API_VERSION or version > MAX_API_VERSION:
        raise StripeValidationError(
            f"API version '{version}' is outside the supported range "
            f"{MIN_API_VERSION}..{MAX_API_VERSION}",
            param="api_version",
        )
    return version


def validate_statement_descriptor(value: str | None, param: str = "statement_descriptor") -> Any:
    if value is not None and not STATEMENT_DESCRIPTOR_PATTERN.fullmatch(value):
        raise StripeValidationError(
            f"The statement descriptor you provided '{value}' must be 22 characters "
            "or less and not contain <>\"'.",
            param=param,
        )
    return value


def validate_non_negative(param: str, value: int | None) -> Any:
    if value is not None and value < 0:
        raise StripeValidationError(f"'{param}' must be zero or greater", param=param)
    return value
