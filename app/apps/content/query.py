"""
Listing query helpers for content resources
"""
from sqlalchemy import String, column, func, or_, select
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple
import math


@dataclass
class ListParams:
    """Caller supplied listing criteria"""
    page: int = 1
    limit: int = 10
    category: Optional[str] = None
    featured: Optional[bool] = None
    search: Optional[str] = None


@dataclass
class SearchParams:
    """Criteria for the advanced search; at least one of the filters must be set"""
    query: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    author: Optional[str] = None
    page: int = 1
    limit: int = 10

    def is_empty(self) -> bool:
        return not any((value or "").strip() for value in (self.query, self.category, self.tag, self.author))


def tag_contains(tags_column: Any, term: str, dialect_name: str):
    """
    EXISTS condition: some element of a JSON string array contains `term`
    (case-insensitive, LIKE wildcards in `term` taken literally).

    PostgreSQL stores the array as JSONB and expands it with
    jsonb_array_elements_text; SQLite expands it with json_each.
    """
    if dialect_name == "postgresql":
        elements = func.jsonb_array_elements_text(tags_column).table_valued(column("value", String)).alias("tag")
    else:
        elements = func.json_each(tags_column).table_valued(column("value", String)).alias("tag")

    return (
        select(elements.c.value)
        .where(elements.c.value.icontains(term, autoescape=True))
        .exists()
    )


def text_matches(model: Any, fields: Sequence[str], term: str) -> List[Any]:
    return [getattr(model, name).icontains(term, autoescape=True) for name in fields]


def build_list_filters(
    model: Any,
    params: ListParams,
    search_fields: Sequence[str],
    tags_field: Optional[str] = None,
    dialect_name: str = "sqlite",
) -> List[Any]:
    """
    Build the WHERE conditions for a public listing.

    Listings only ever include visible items. A search term matches
    case-insensitively as a substring of any search field or of any single tag.
    """
    conditions = [model.visible == True]  # noqa: E712

    if params.category:
        conditions.append(model.category == params.category)

    if params.featured is not None:
        conditions.append(model.featured == params.featured)

    term = (params.search or "").strip()
    if term:
        matches = text_matches(model, search_fields, term)
        if tags_field:
            matches.append(tag_contains(getattr(model, tags_field), term, dialect_name))
        conditions.append(or_(*matches))

    return conditions


def build_search_filters(
    model: Any,
    params: SearchParams,
    search_fields: Sequence[str],
    author_field: str,
    tags_field: Optional[str] = None,
    dialect_name: str = "sqlite",
) -> List[Any]:
    """
    WHERE conditions for the advanced search over visible items.

    `query` matches the search fields, the author or any tag. `category`,
    `tag` and `author` are case-insensitive substring filters and all of the
    given filters must hold.
    """
    conditions = [model.visible == True]  # noqa: E712
    author = getattr(model, author_field)

    query = (params.query or "").strip()
    if query:
        matches = text_matches(model, search_fields, query)
        matches.append(author.icontains(query, autoescape=True))
        if tags_field:
            matches.append(tag_contains(getattr(model, tags_field), query, dialect_name))
        conditions.append(or_(*matches))

    category = (params.category or "").strip()
    if category:
        conditions.append(model.category.icontains(category, autoescape=True))

    tag = (params.tag or "").strip()
    if tag and tags_field:
        conditions.append(tag_contains(getattr(model, tags_field), tag, dialect_name))

    author_term = (params.author or "").strip()
    if author_term:
        conditions.append(author.icontains(author_term, autoescape=True))

    return conditions


def pagination_window(page: int, limit: int, total: int) -> Optional[Tuple[int, int]]:
    """
    Return (offset, limit) for the requested page, or None when the whole
    result set fits in one page. In that case every match is returned
    whatever page was asked for.
    """
    if limit >= total:
        return None
    return (page - 1) * limit, limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)
