"""Cursor-paginated lists of Stripe objects."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, ClassVar, Iterator, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_serializer

from .base import StripeObject, WireBool


class StripeList(BaseModel):
    """One page of objects returned by a list endpoint.

    ``data`` keeps the order the server returned. When ``has_more`` is set a
    further page can be requested with ``next_page_args()``.

    Example:
        ```python
        page = client.get_customers(limit=10)
        while True:
            for customer in page:
                ...
            if not page.has_more:
                break
            page = client.get_customers(limit=10, **page.next_page_args())
        ```
    """

    OBJECT: ClassVar[str] = "list"

    model_config = ConfigDict(frozen=True, extra="ignore")

    data: tuple[Any, ...]
    has_more: WireBool = False
    url: str
    count: Optional[int] = None
    total_count: Optional[int] = None

    @model_serializer(mode="wrap")
    def _with_discriminator(self, handler: Any) -> Any:
        data = handler(self)
        if isinstance(data, dict):
            return {"object": self.OBJECT, **data}
        return data

    # ========================================================================
    # Sequence access
    # ========================================================================

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __getitem__(self, index: int) -> Any:
        return self.data[index]

    @property
    def elements(self) -> list[Any]:
        return list(self.data)

    def is_empty(self) -> bool:
        return not self.data

    def first(self) -> Any:
        return self.data[0] if self.data else None

    def last(self) -> Any:
        return self.data[-1] if self.data else None

    # ========================================================================
    # Pagination
    # ========================================================================

    def cursor_for_next_page(self) -> str:
        """Id of the last element, to be passed as ``starting_after``.

        Raises:
            ValueError: If the list is empty.
        """
        if not self.data:
            raise ValueError("Cannot page forward from an empty list")
        return _id_of(self.data[-1])

    def cursor_for_previous_page(self) -> str:
        """Id of the first element, to be passed as ``ending_before``.

        Raises:
            ValueError: If the list is empty.
        """
        if not self.data:
            raise ValueError("Cannot page backward from an empty list")
        return _id_of(self.data[0])

    def next_page_args(self) -> dict[str, str]:
        return {"starting_after": self.cursor_for_next_page()}

    def previous_page_args(self) -> dict[str, str]:
        return {"ending_before": self.cursor_for_previous_page()}

    @classmethod
    def merge(cls, lists: Sequence[StripeList]) -> StripeList:
        """Concatenate pages into one list.

        Pages must be supplied in order; nothing is fetched and nothing is
        deduplicated. The result never has more pages.

        Args:
            lists: Pages to join, in page order.

        Returns:
            A list with every element, the last page's url, and a count that
            is the sum of the input counts when every page has one.
        """
        if not lists:
            raise ValueError("merge requires at least one list")

        counts = [page.count for page in lists]
        return cls(
            data=tuple(item for page in lists for item in page.data),
            has_more=False,
            url=lists[-1].url,
            count=sum(counts) if all(count is not None for count in counts) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def _id_of(item: Any) -> str:
    if isinstance(item, Mapping):
        return item["id"]
    return item.id


def _hydrate(item_cls: type[StripeObject], item: Any) -> Any:
    if isinstance(item, Mapping) and item.get("object", item_cls.OBJECT) == item_cls.OBJECT:
        return item_cls.model_validate(item)
    return item


def list_of(item_cls: type[StripeObject]) -> Any:
    """Build the annotated type for a field holding a list of ``item_cls``.

    Raw maps (and, for callers, raw arrays) are turned into a StripeList and
    untyped elements are hydrated into ``item_cls``. Elements of another
    type are left as they are.
    """

    def to_list(value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, StripeList):
            data = tuple(_hydrate(item_cls, item) for item in value.data)
            if all(new is old for new, old in zip(data, value.data)):
                return value
            return value.model_copy(update={"data": data})
        if isinstance(value, Mapping):
            value = dict(value)
            value["data"] = [_hydrate(item_cls, item) for item in value.get("data") or ()]
            return value
        if isinstance(value, (list, tuple)):
            return StripeList(
                data=tuple(_hydrate(item_cls, item) for item in value),
                has_more=False,
                url="",
                count=len(value),
            )
        return value

    return Annotated[Optional[StripeList], BeforeValidator(to_list)]
