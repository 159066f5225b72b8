"""
Blog router
Blog posts are the reference content resource; documents, team members
and events follow the same contract.
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Union
import logging

from app.dependencies import get_db, get_media_uploader
from app.apps.blog.models import BlogPost
from app.apps.blog.schemas import (
    BlogComment,
    BlogPostCreate,
    BlogPostRead,
    BlogPostUpdate,
    CommentResponse,
    CommentsResponse,
    LikesResponse,
)
from app.apps.blog.service import BlogService
from app.apps.content.query import ListParams, SearchParams
from app.apps.content.schemas import (
    CategoriesResponse,
    DeleteAllResponse,
    DeleteItemResponse,
    ItemListResponse,
    ItemResponse,
    MessageResponse,
    Pagination,
    SearchCriteria,
    SearchResponse,
    StatsResponse,
    TagsResponse,
)
from app.apps.media.uploader import MediaUploader
from app.common.errors import ContentError, StoreError, ValidationError
from app.common.request_decoder import RequestDecoder

logger = logging.getLogger(__name__)

router = APIRouter()

# Media folder within the bucket
BLOG_MEDIA_FOLDER = "blogs"

blog_decoder = RequestDecoder(
    json_fields=("tags",),
    bool_fields=("visible", "visibility", "featured"),
)
comment_decoder = RequestDecoder()


def get_blog_service(
    session: AsyncSession = Depends(get_db),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> BlogService:
    return BlogService(
        session,
        uploader,
        model=BlogPost,
        create_schema=BlogPostCreate,
        update_schema=BlogPostUpdate,
        resource_name="Blog",
        media_folder=BLOG_MEDIA_FOLDER,
    )


@router.get(
    "",
    response_model=Union[ItemResponse[BlogPostRead], ItemListResponse[BlogPostRead]],
    status_code=status.HTTP_200_OK,
)
async def get_blogs(
    id: Optional[int] = Query(None, description="Fetch one blog by ID"),
    slug: Optional[str] = Query(None, description="Fetch one visible blog by slug"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Matches title, summary, body or tags"),
    service: BlogService = Depends(get_blog_service),
):
    """
    Get blogs (public endpoint)

    - `id`: exact lookup, counts a view
    - `slug`: exact lookup, only visible blogs
    - otherwise a paginated listing of visible blogs, newest first
    """
    try:
        if id is not None:
            blog = await service.record_view(id)
            return ItemResponse[BlogPostRead](item=BlogPostRead.model_validate(blog))

        if slug:
            blog = await service.get_by_slug(slug)
            return ItemResponse[BlogPostRead](item=BlogPostRead.model_validate(blog))

        params = ListParams(page=page, limit=limit, category=category, featured=featured, search=search)
        blogs, pagination = await service.list_items(params)
        return ItemListResponse[BlogPostRead](
            items=[BlogPostRead.model_validate(blog) for blog in blogs],
            pagination=Pagination(**pagination),
        )
    except ContentError:
        raise
    except Exception as e:
        logger.error(f"Error fetching blogs: {str(e)}", exc_info=True)
        raise StoreError("Failed to fetch blogs")


@router.post("", response_model=ItemResponse[BlogPostRead], status_code=status.HTTP_201_CREATED)
async def create_blog(
    request: Request,
    service: BlogService = Depends(get_blog_service),
):
    """
    Create a blog from a JSON body or a multipart form (admin panel)

    Multipart submissions send `tags` as a JSON-encoded string and may carry
    one JPEG/PNG image (max 5MB) that is uploaded before the blog is saved.
    """
    decoded = await blog_decoder.decode(request)
    try:
        blog = await service.create(decoded)
        return ItemResponse[BlogPostRead](item=BlogPostRead.model_validate(blog))
    except ContentError:
        raise
    except Exception as e:
        logger.error(f"Error creating blog: {str(e)}", exc_info=True)
        raise StoreError("Failed to create blog")


@router.put("", response_model=ItemResponse[BlogPostRead], status_code=status.HTTP_200_OK)
async def update_blog(
    request: Request,
    id: Optional[int] = Query(None, description="ID of the blog to update"),
    service: BlogService = Depends(get_blog_service),
):
    """
    Update a blog (requires ID in query params)
    Only the fields present in the body are changed.
    """
    if id is None:
        raise ValidationError("Blog ID is required")

    decoded = await blog_decoder.decode(request)
    try:
        blog = await service.update(id, decoded)
        return ItemResponse[BlogPostRead](item=BlogPostRead.model_validate(blog))
    except ContentError:
        raise
    except Exception as e:
        logger.error(f"Error updating blog: {str(e)}", exc_info=True)
        raise StoreError("Failed to update blog")


@router.delete(
    "",
    response_model=Union[DeleteItemResponse[BlogPostRead], DeleteAllResponse],
    status_code=status.HTTP_200_OK,
)
async def delete_blogs(
    id: Optional[int] = Query(None, description="ID of the blog to delete; omit to delete ALL blogs"),
    service: BlogService = Depends(get_blog_service),
):
    """
    Delete one blog by ID, or every blog when no ID is given.
    Deleting all blogs is irreversible and not confirmed here; gate it upstream.
    """
    try:
        if id is not None:
            blog = await service.delete(id)
            return DeleteItemResponse[BlogPostRead](
                message="Blog deleted successfully",
                deleted_item=BlogPostRead.model_validate(blog),
            )

        deleted_count = await service.delete_all()
        return DeleteAllResponse(message=f"Deleted {deleted_count} blogs", deleted_count=deleted_count)
    except ContentError:
        raise
    except Exception as e:
        logger.error(f"Error deleting blogs: {str(e)}", exc_info=True)
        raise StoreError("Failed to delete blogs")


@router.get("/categories", response_model=CategoriesResponse, status_code=status.HTTP_200_OK)
async def get_blog_categories(service: BlogService = Depends(get_blog_service)):
    """Distinct categories of visible blogs"""
    return CategoriesResponse(categories=await service.list_categories())


@router.get("/tags", response_model=TagsResponse, status_code=status.HTTP_200_OK)
async def get_blog_tags(service: BlogService = Depends(get_blog_service)):
    """Distinct tags across visible blogs"""
    return TagsResponse(tags=await service.list_tags())


@router.get("/stats", response_model=StatsResponse, status_code=status.HTTP_200_OK)
async def get_blog_stats(service: BlogService = Depends(get_blog_service)):
    """Blog statistics: overview counts, category distribution and top authors"""
    return StatsResponse(stats=await service.stats())


@router.get("/search", response_model=SearchResponse[BlogPostRead], status_code=status.HTTP_200_OK)
async def search_blogs(
    q: Optional[str] = Query(None, description="Matches title, summary, body, author or tags"),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    service: BlogService = Depends(get_blog_service),
):
    """
    Advanced search over visible blogs
    At least one of q, category, tag or author is required.
    """
    params = SearchParams(query=q, category=category, tag=tag, author=author, page=page, limit=limit)
    blogs, pagination = await service.search(params)
    return SearchResponse[BlogPostRead](
        items=[BlogPostRead.model_validate(blog) for blog in blogs],
        search=SearchCriteria(query=q, category=category, tag=tag, author=author),
        pagination=Pagination(**pagination),
    )


@router.post("/{blog_id}/like", response_model=LikesResponse, status_code=status.HTTP_200_OK)
async def like_blog(blog_id: int, service: BlogService = Depends(get_blog_service)):
    likes = await service.like(blog_id)
    return LikesResponse(message="Blog liked successfully", likes=likes)


@router.delete("/{blog_id}/like", response_model=LikesResponse, status_code=status.HTTP_200_OK)
async def unlike_blog(blog_id: int, service: BlogService = Depends(get_blog_service)):
    likes = await service.unlike(blog_id)
    return LikesResponse(message="Blog unliked successfully", likes=likes)


@router.get("/{blog_id}/comments", response_model=CommentsResponse, status_code=status.HTTP_200_OK)
async def get_blog_comments(blog_id: int, service: BlogService = Depends(get_blog_service)):
    """Comments of a blog, oldest first"""
    blog = await service.list_comments(blog_id)
    return CommentsResponse(
        blog_title=blog.title,
        comments=[BlogComment.model_validate(comment) for comment in blog.comments or []],
    )


@router.post("/{blog_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_blog_comment(
    blog_id: int,
    request: Request,
    service: BlogService = Depends(get_blog_service),
):
    """Add a comment; body carries `user` and `comment`"""
    decoded = await comment_decoder.decode(request)
    comment = await service.add_comment(blog_id, decoded.fields)
    return CommentResponse(message="Comment added successfully", comment=BlogComment.model_validate(comment))


@router.delete("/{blog_id}/comments", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def delete_blog_comment(
    blog_id: int,
    index: Optional[str] = Query(None, description="Position of the comment, 0 is the oldest"),
    service: BlogService = Depends(get_blog_service),
):
    try:
        comment_index = int(index)
    except (TypeError, ValueError):
        raise ValidationError("Valid comment index is required")

    await service.delete_comment(blog_id, comment_index)
    return MessageResponse(message="Comment deleted successfully")
