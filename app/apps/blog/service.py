"""
Blog service
Blog posts use the shared content contract plus reader engagement:
view counting, likes and comments.
"""
from sqlalchemy import case, func, select, update
from datetime import datetime, timezone
from typing import Any, Dict, List
import logging

from app.apps.blog.models import BlogPost
from app.apps.blog.schemas import BlogCommentCreate
from app.apps.content.service import ContentResourceService
from app.common.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class BlogService(ContentResourceService):
    """ContentResourceService for BlogPost with engagement operations"""

    async def _bump(self, item_id: int, **values) -> BlogPost:
        """Apply an in-database counter update and return the refreshed blog"""
        blog = await self._fetch(item_id)
        stmt = (
            update(BlogPost)
            .where(BlogPost.id == item_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._execute(stmt)
        await self._commit()
        await self.session.refresh(blog)
        return blog

    async def record_view(self, item_id: int) -> BlogPost:
        """Fetch a blog by ID and count the read"""
        blog = await self._bump(item_id, views=BlogPost.views + 1)
        logger.info(f"Blog viewed: {blog.title} (id={item_id}, views={blog.views})")
        return blog

    async def like(self, item_id: int) -> int:
        blog = await self._bump(item_id, likes=BlogPost.likes + 1)
        logger.info(f"Blog liked: {blog.title} (likes={blog.likes})")
        return blog.likes

    async def unlike(self, item_id: int) -> int:
        """Decrement likes, never below zero"""
        blog = await self._bump(
            item_id,
            likes=case((BlogPost.likes > 0, BlogPost.likes - 1), else_=0),
        )
        logger.info(f"Blog unliked: {blog.title} (likes={blog.likes})")
        return blog.likes

    async def _fetch_for_update(self, item_id: int) -> BlogPost:
        result = await self._execute(
            select(BlogPost)
            .where(BlogPost.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        blog = result.scalar_one_or_none()
        if blog is None:
            logger.info(f"Blog not found with ID: {item_id}")
            raise NotFoundError("Blog not found")
        return blog

    async def list_comments(self, item_id: int) -> BlogPost:
        return await self._fetch(item_id)

    async def add_comment(self, item_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        if not str(fields.get("user") or "").strip() or not str(fields.get("comment") or "").strip():
            raise ValidationError("User and comment are required")
        try:
            payload = BlogCommentCreate.model_validate(fields)
        except ValueError as e:
            raise ValidationError(self._validation_message(e))

        blog = await self._fetch_for_update(item_id)
        comment = {
            "user": payload.user,
            "comment": payload.comment,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        # JSON columns only persist on reassignment
        blog.comments = [*(blog.comments or []), comment]
        await self._commit()
        logger.info(f"Comment added to blog: {blog.title} (comments={len(blog.comments)})")
        return comment

    async def delete_comment(self, item_id: int, index: int) -> None:
        if index < 0:
            raise ValidationError("Valid comment index is required")

        blog = await self._fetch_for_update(item_id)
        comments: List[Dict[str, Any]] = list(blog.comments or [])
        if index >= len(comments):
            raise NotFoundError("Comment not found")

        del comments[index]
        blog.comments = comments
        await self._commit()
        logger.info(f"Comment {index} deleted from blog: {blog.title}")

    async def stats(self) -> Dict[str, Any]:
        stats = await super().stats()

        result = await self._execute(
            select(
                func.coalesce(func.sum(BlogPost.views), 0),
                func.coalesce(func.sum(BlogPost.likes), 0),
                func.avg(BlogPost.read_time),
            ).where(BlogPost.visible == True)  # noqa: E712
        )
        total_views, total_likes, average_read_time = result.one()
        stats["engagement"] = {
            "total_views": int(total_views),
            "total_likes": int(total_likes),
            "average_read_time": round(float(average_read_time or 0), 2),
        }
        return stats
