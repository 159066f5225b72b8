"""
Pydantic schemas shared by every content resource
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Generic, List, Optional, TypeVar


ItemT = TypeVar("ItemT")


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts snake_case or camelCase input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class ItemResponse(CamelModel, Generic[ItemT]):
    item: ItemT


class ItemListResponse(CamelModel, Generic[ItemT]):
    items: List[ItemT]
    pagination: Pagination


class SearchCriteria(CamelModel):
    query: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    author: Optional[str] = None


class SearchResponse(CamelModel, Generic[ItemT]):
    items: List[ItemT]
    search: SearchCriteria
    pagination: Pagination


class MessageResponse(CamelModel):
    message: str


class DeleteItemResponse(CamelModel, Generic[ItemT]):
    message: str
    deleted_item: ItemT


class DeleteAllResponse(CamelModel):
    message: str
    deleted_count: int


class CategoriesResponse(CamelModel):
    categories: List[str]


class TagsResponse(CamelModel):
    tags: List[str]


class StatsOverview(CamelModel):
    total: int
    published: int
    drafts: int
    featured: int
    recent: int


class CategoryCount(CamelModel):
    category: str
    count: int


class AuthorCount(CamelModel):
    author: str
    count: int


class EngagementStats(CamelModel):
    total_views: int = 0
    total_likes: int = 0
    average_read_time: float = 0


class ContentStats(CamelModel):
    overview: StatsOverview
    categories: List[CategoryCount]
    top_authors: List[AuthorCount]
    engagement: Optional[EngagementStats] = None


class StatsResponse(CamelModel):
    stats: ContentStats
