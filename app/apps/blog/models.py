"""
Blog models
"""
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlogPost(SQLModel, table=True):
    """
    Blog post model
    Table: blog_posts
    """
    __tablename__ = "blog_posts"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    slug: str = Field(max_length=255, unique=True, index=True)  # e.g., "robotics-club-2024"
    summary: str = Field(max_length=500)
    body: str
    author_name: str = Field(max_length=255)
    author_image_url: str = Field(default="", max_length=500)
    category: str = Field(default="General", max_length=100, index=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON().with_variant(JSONB, "postgresql")))
    media_url: str = Field(default="", max_length=500)
    visible: bool = Field(default=True, index=True)
    featured: bool = Field(default=False, index=True)
    read_time: int = Field(default=5)  # minutes

    # Engagement
    views: int = Field(default=0)
    likes: int = Field(default=0)
    # [{"user": "...", "comment": "...", "created_at": "<ISO 8601>"}, ...] oldest first
    comments: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON().with_variant(JSONB, "postgresql")),
    )

    published_at: Optional[datetime] = Field(default=None, index=True, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
