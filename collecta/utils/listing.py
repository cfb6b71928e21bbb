from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from fastapi import Query

from collecta.config import config

T = TypeVar("T")


@dataclass(frozen=True)
class ListQuery:
    page: int = 1
    page_size: int = 9
    search: str = ""
    predicates: Sequence[Callable[[Any], bool]] = field(default_factory=tuple)
    sort_key: Optional[Callable[[Any], Any]] = None
    sort_descending: bool = False


@dataclass
class Page(Generic[T]):
    rows: List[T]
    page: int
    page_size: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total

    def envelope(self, key: str, serialize: Callable[[T], Any]) -> Dict[str, Any]:
        return {
            "success": True,
            key: [serialize(row) for row in self.rows],
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "has_more": self.has_more,
        }


def matches_search(row: Any, search: str, attributes: Sequence[str]) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True

    for attribute in attributes:
        value = getattr(row, attribute, None)
        if value is not None and needle in str(value).lower():
            return True

    return False


def apply_listing(rows: Sequence[T], query: ListQuery, search_attributes: Sequence[str]) -> Page[T]:
    """Filter, optionally re-sort and slice ``rows`` already ordered by the store."""
    selected = [
        row for row in rows
        if matches_search(row, query.search, search_attributes)
        and all(predicate(row) for predicate in query.predicates)
    ]

    if query.sort_key is not None:
        selected.sort(key=query.sort_key, reverse=query.sort_descending)

    start = (query.page - 1) * query.page_size
    return Page(
        rows=selected[start:start + query.page_size],
        page=query.page,
        page_size=query.page_size,
        total=len(selected),
    )


def list_query(
    search: str = Query("", max_length=100),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
) -> ListQuery:
    return ListQuery(page=page, page_size=page_size or config.DEFAULT_PAGE_SIZE, search=search)
