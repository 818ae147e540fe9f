"""State containers shared by every list-and-detail tab."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class SortKey(str, enum.Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    RATING_DESC = "rating-desc"
    RATING_ASC = "rating-asc"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_LABELS = {
    SortKey.DATE_DESC: "Date: Newest First",
    SortKey.DATE_ASC: "Date: Oldest First",
    SortKey.NAME_ASC: "Name: A to Z",
    SortKey.NAME_DESC: "Name: Z to A",
    SortKey.RATING_DESC: "Rating: Highest First",
    SortKey.RATING_ASC: "Rating: Lowest First",
}

DATE_AND_NAME_KEYS: Tuple[SortKey, ...] = (
    SortKey.DATE_DESC,
    SortKey.DATE_ASC,
    SortKey.NAME_ASC,
    SortKey.NAME_DESC,
)
ALL_SORT_KEYS: Tuple[SortKey, ...] = tuple(SortKey)


@dataclass(frozen=True, slots=True)
class ListState(Generic[T]):
    """Items in server order plus the fetch status for one resource."""

    items: Tuple[T, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    loaded: bool = False


@dataclass(frozen=True, slots=True)
class FilterState:
    search_term: str = ""
    sort_key: SortKey = SortKey.DATE_DESC
    panel_open: bool = False
    status: str = "all"
    department: str = "all"

    @property
    def is_active(self) -> bool:
        return bool(self.search_term) or self.sort_key != SortKey.DATE_DESC or self.status != "all" or self.department != "all"

    def cleared(self) -> "FilterState":
        return FilterState(panel_open=self.panel_open)


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Entity and draft inputs owned by the currently open modal flow."""

    item: Any = None
    action: Optional[str] = None
    comments: str = ""
    feedback: str = ""
    rating: Optional[int] = None
    attachments: Tuple[Any, ...] = ()
