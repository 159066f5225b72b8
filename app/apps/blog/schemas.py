"""
Pydantic schemas for the blog module
"""
from pydantic import AliasChoices, ConfigDict, Field, field_validator
from typing import Any, List, Optional
from datetime import datetime

from app.apps.content.schemas import CamelModel
from app.common.fields import normalize_slug, normalize_tags


class BlogPostCreate(CamelModel):
    """Create blog post schema"""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=255)
    summary: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., min_length=1, validation_alias=AliasChoices("body", "content"))
    author_name: str = Field(
        ..., min_length=1, max_length=255,
        validation_alias=AliasChoices("author_name", "authorName", "author"),
    )
    author_image_url: str = Field(
        "", max_length=500,
        validation_alias=AliasChoices("author_image_url", "authorImageUrl", "authorImage"),
    )
    category: str = Field("General", max_length=100)
    tags: List[str] = Field(default_factory=list)
    visible: bool = Field(True, validation_alias=AliasChoices("visible", "visibility"))
    featured: bool = False
    read_time: int = Field(5, ge=1, validation_alias=AliasChoices("read_time", "readTime"))

    @field_validator("slug")
    @classmethod
    def lowercase_slug(cls, value: str) -> str:
        return normalize_slug(value)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    @field_validator("category", "author_image_url", mode="before")
    @classmethod
    def empty_when_null(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("category")
    @classmethod
    def default_category(cls, value: str) -> str:
        return value or "General"


class BlogPostUpdate(CamelModel):
    """
    Update blog post schema
    Fields left out (or sent as null) are not changed.
    media_url, published_at, the timestamps and the engagement counters
    (views, likes, comments) cannot be set by callers.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    summary: Optional[str] = Field(None, min_length=1, max_length=500)
    body: Optional[str] = Field(None, min_length=1, validation_alias=AliasChoices("body", "content"))
    author_name: Optional[str] = Field(
        None, min_length=1, max_length=255,
        validation_alias=AliasChoices("author_name", "authorName", "author"),
    )
    author_image_url: Optional[str] = Field(
        None, max_length=500,
        validation_alias=AliasChoices("author_image_url", "authorImageUrl", "authorImage"),
    )
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    visible: Optional[bool] = Field(None, validation_alias=AliasChoices("visible", "visibility"))
    featured: Optional[bool] = None
    read_time: Optional[int] = Field(None, ge=1, validation_alias=AliasChoices("read_time", "readTime"))

    @field_validator("slug")
    @classmethod
    def lowercase_slug(cls, value: Optional[str]) -> Optional[str]:
        return normalize_slug(value) if value is not None else value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> Optional[List[str]]:
        return normalize_tags(value) if value is not None else value


class BlogComment(CamelModel):
    user: str
    comment: str
    created_at: datetime


class BlogCommentCreate(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    user: str = Field(..., min_length=1)
    comment: str = Field(..., min_length=1)


class BlogPostRead(CamelModel):
    """Blog post response schema"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    summary: str
    body: str
    author_name: str
    author_image_url: str
    category: str
    tags: List[str]
    media_url: str
    visible: bool
    featured: bool
    read_time: int
    views: int
    likes: int
    comments: List[BlogComment] = []
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", "comments", mode="before")
    @classmethod
    def empty_list_when_null(cls, value: Any) -> Any:
        return [] if value is None else value


class LikesResponse(CamelModel):
    message: str
    likes: int


class CommentsResponse(CamelModel):
    blog_title: str
    comments: List[BlogComment]


class CommentResponse(CamelModel):
    message: str
    comment: BlogComment
