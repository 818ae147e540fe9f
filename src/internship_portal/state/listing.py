"""Pure list helpers shared by the tab controllers."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import locale
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from internship_portal.models.listing import SortKey

T = TypeVar("T")

FieldGetter = Callable[[T], Iterable[Optional[str]]]
DateGetter = Callable[[T], Optional[_dt.datetime]]
NameGetter = Callable[[T], Optional[str]]
RatingGetter = Callable[[T], Optional[float]]


def is_justified(text: Optional[str]) -> bool:
    """Mutating actions need a non-blank comment or feedback."""

    return bool(text and text.strip())


def filter_items(items: Sequence[T], term: Optional[str], fields: FieldGetter) -> List[T]:
    """Case-insensitive substring match of ``term`` over each item's fields.

    A blank term keeps every item; order is preserved.
    """

    needle = (term or "").strip().casefold()
    if not needle:
        return list(items)
    return [item for item in items if any(needle in (value or "").casefold() for value in fields(item))]


def _name_key(value: Optional[str]) -> str:
    return locale.strxfrm((value or "").casefold())


def sort_items(
    items: Sequence[T],
    key: SortKey | str,
    *,
    date: Optional[DateGetter] = None,
    name: Optional[NameGetter] = None,
    rating: Optional[RatingGetter] = None,
) -> List[T]:
    """Return a sorted copy of ``items``.

    Missing dates and ratings sort last in both directions. A key the caller
    has no getter for keeps the input order.
    """

    result = list(items)
    try:
        sort_key = SortKey(key)
    except ValueError:
        return result

    if sort_key in (SortKey.DATE_DESC, SortKey.DATE_ASC) and date is not None:
        present = [item for item in result if date(item) is not None]
        missing = [item for item in result if date(item) is None]
        present.sort(key=date, reverse=sort_key is SortKey.DATE_DESC)  # type: ignore[arg-type]
        return present + missing
    if sort_key in (SortKey.NAME_ASC, SortKey.NAME_DESC) and name is not None:
        result.sort(key=lambda item: _name_key(name(item)), reverse=sort_key is SortKey.NAME_DESC)
        return result
    if sort_key in (SortKey.RATING_DESC, SortKey.RATING_ASC) and rating is not None:
        present = [item for item in result if rating(item) is not None]
        missing = [item for item in result if rating(item) is None]
        present.sort(key=rating, reverse=sort_key is SortKey.RATING_DESC)  # type: ignore[arg-type]
        return present + missing
    return result


def patch_item(items: Sequence[T], item_id: str, **changes: Any) -> Tuple[T, ...]:
    """Replace the fields of the item whose ``id`` matches; all others are kept as-is."""

    return tuple(
        dataclasses.replace(item, **changes) if getattr(item, "id", None) == item_id else item  # type: ignore[type-var]
        for item in items
    )


def find_item(items: Sequence[T], item_id: str) -> Optional[T]:
    for item in items:
        if getattr(item, "id", None) == item_id:
            return item
    return None
