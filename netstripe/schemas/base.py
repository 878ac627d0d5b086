"""Base model and shared field types for Stripe resources."""

from __future__ import annotations

from collections.abc import Mapping
from numbers import Number
from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    PrivateAttr,
    SerializationInfo,
    SerializeAsAny,
    model_serializer,
    model_validator,
)

# Values a JSON decoder produces natively, Decimal included; anything else carrying
# __bool__ is a boxed boolean
JSON_NATIVE_TYPES = (dict, list, tuple, str, bytes, Number, type(None))

TRUE_STRINGS = ("true", "1")
FALSE_STRINGS = ("false", "0")


# ============================================================================
# Wire booleans
# ============================================================================


def is_wire_boolean(value: Any) -> bool:
    """Check whether value is a boolean as it may arrive from the wire.

    Native booleans qualify, as do boxed boolean wrappers: objects that are
    neither JSON-native values, numbers nor models but define ``__bool__``
    (for example the singleton boolean types some JSON libraries decode
    into). Numbers such as ``Decimal`` from ``parse_float=Decimal`` are
    never booleans.

    Args:
        value: Any decoded value.

    Returns:
        True if value should be normalized with ``bool()``.
    """
    if isinstance(value, bool):
        return True
    if isinstance(value, (*JSON_NATIVE_TYPES, BaseModel)):
        return False
    return hasattr(type(value), "__bool__")


def coerce_wire_bool(value: Any) -> Any:
    """Normalize any wire representation of a boolean to ``True``/``False``.

    Values that are not recognizably boolean are returned untouched so that
    pydantic reports them.
    """
    if is_wire_boolean(value):
        return bool(value)
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return value


WireBool = Annotated[bool, BeforeValidator(coerce_wire_bool)]


# ============================================================================
# Metadata
# ============================================================================


class _Clearable:
    """Marks a field whose empty value is sent to clear it server-side."""

    def __repr__(self) -> str:
        return "CLEARABLE"


CLEARABLE = _Clearable()

Metadata = Optional[dict[str, Any]]

# Metadata that may be explicitly emptied with metadata=""
ClearableMetadata = Annotated[Optional[Union[dict[str, Any], Literal[""]]], CLEARABLE]


# ============================================================================
# StripeObject
# ============================================================================


class StripeObject(BaseModel):
    """Base class for every Stripe resource.

    Subclasses declare their wire discriminator in ``OBJECT`` and the ordered
    list of fields that may be submitted in ``FORM_FIELDS``. Keys in the
    input that are not modeled are kept in a passthrough store rather than
    becoming attributes.
    """

    OBJECT: ClassVar[str] = ""
    FORM_FIELDS: ClassVar[tuple[str, ...]] = ()
    # Legacy input spellings mapped onto their canonical field
    ALIASES: ClassVar[dict[str, str]] = {}

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None

    _unmodeled: dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _split_unmodeled(cls, data: Any, handler: Any) -> Any:
        if not isinstance(data, Mapping):
            return handler(data)

        canonical: dict[str, Any] = {}
        for key, value in data.items():
            target = cls.ALIASES.get(key, key)
            if target != key and target in data:
                continue
            canonical[target] = value

        instance = handler(canonical)
        instance._unmodeled = {
            key: value
            for key, value in canonical.items()
            if key not in cls.model_fields and key != "object"
        }
        return instance

    @model_serializer(mode="wrap")
    def _with_discriminator(self, handler: Any) -> Any:
        data = handler(self)
        if isinstance(data, dict) and self.OBJECT and "object" not in data:
            return {"object": self.OBJECT, **data}
        return data

    @property
    def unmodeled_fields(self) -> dict[str, Any]:
        """Raw values the server sent for keys this class does not model."""
        return dict(self._unmodeled)

    def form_field_names(self) -> tuple[str, ...]:
        """Fields submitted when this object is form encoded, in order."""
        return self.FORM_FIELDS

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON wire shape of this object, discriminator included."""
        return self.model_dump(mode="json", exclude_none=True)


# ============================================================================
# Tagged references
# ============================================================================


class RawId(BaseModel):
    """Reference to an existing object by id."""

    model_config = ConfigDict(frozen=True)

    id: str

    @model_serializer
    def _serialize(self) -> str:
        return self.id


class TokenReference(BaseModel):
    """Reference to a single-use token (``tok_...``)."""

    model_config = ConfigDict(frozen=True)

    id: str

    @model_serializer
    def _serialize(self) -> str:
        return self.id


class InlineObject(BaseModel):
    """A full sub-object embedded in its parent.

    ``is_new`` is set when the caller built the sub-object inline, in which
    case it is expanded on encode even if it carries an id.
    """

    model_config = ConfigDict(frozen=True)

    resource: SerializeAsAny[StripeObject]
    is_new: bool = False

    @property
    def id(self) -> str | None:
        return self.resource.id

    @model_serializer
    def _serialize(self, info: SerializationInfo) -> Any:
        return self.resource.model_dump(
            mode=info.mode,
            by_alias=info.by_alias,
            exclude_none=info.exclude_none,
        )


Reference = Union[RawId, TokenReference, InlineObject]


def serialize_reference(value: Any, info: SerializationInfo) -> Any:
    """Write a reference as its wire value: the id, or the full embedded object."""
    if isinstance(value, InlineObject):
        return value.resource.model_dump(
            mode=info.mode,
            by_alias=info.by_alias,
            exclude_none=info.exclude_none,
        )
    if isinstance(value, (RawId, TokenReference)):
        return value.id
    return value


def inline(resource: StripeObject) -> InlineObject:
    """Embed a newly built sub-object so it is expanded on encode."""
    return InlineObject(resource=resource, is_new=True)


def reference_to(resource_cls: type[StripeObject], tokens: bool = False) -> Any:
    """Build the annotated type for a field holding a tagged reference.

    The input is resolved once, at construction:

    - ``tok_`` strings (when ``tokens`` is set) and Token objects become
      TokenReference
    - other strings become RawId
    - model instances become InlineObject
    - raw maps are hydrated into ``resource_cls`` and become a new InlineObject

    Args:
        resource_cls: Type raw maps are hydrated into.
        tokens: Whether the field also accepts token references.

    Returns:
        An ``Annotated`` optional reference type.
    """

    def to_reference(value: Any) -> Any:
        if value is None or isinstance(value, (RawId, TokenReference, InlineObject)):
            return value
        if isinstance(value, str):
            if tokens and value.startswith("tok_"):
                return TokenReference(id=value)
            return RawId(id=value)
        if isinstance(value, StripeObject):
            if tokens and value.OBJECT == "token":
                if value.id is None:
                    raise ValueError("a token must have an id to be used as a reference")
                return TokenReference(id=value.id)
            return InlineObject(resource=value)
        if isinstance(value, Mapping):
            return InlineObject(resource=resource_cls.model_validate(value), is_new=True)
        return value

    return Annotated[
        Optional[Reference],
        BeforeValidator(to_reference),
        PlainSerializer(serialize_reference),
    ]
