"""
Content resource service
Owns the CRUD contract for one content resource (blog posts, documents,
team members, ...): payload validation, slug uniqueness, the media upload
pipeline, listing queries and error mapping.
"""
from pydantic import AliasChoices, BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Type
import logging

from app.apps.content.query import (
    ListParams,
    SearchParams,
    build_list_filters,
    build_search_filters,
    page_count,
    pagination_window,
)
from app.apps.media.uploader import MediaUploader, UploadResult
from app.common.errors import (
    ConflictError,
    NotFoundError,
    StoreError,
    UploadError,
    ValidationError,
)
from app.common.request_decoder import Attachment, DecodedRequest
from app.config import ALLOWED_IMAGE_TYPES, MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
TOP_AUTHORS_LIMIT = 10


def required_field_keys(schema: Type[BaseModel]) -> Dict[str, Set[str]]:
    """Map every required field of a schema to the input keys that can carry it"""
    required = {}
    for name, info in schema.model_fields.items():
        if not info.is_required():
            continue
        keys = {name}
        if info.alias:
            keys.add(info.alias)
        if isinstance(info.validation_alias, AliasChoices):
            keys.update(choice for choice in info.validation_alias.choices if isinstance(choice, str))
        elif isinstance(info.validation_alias, str):
            keys.add(info.validation_alias)
        required[name] = keys
    return required


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _format_validation_errors(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages)


class ContentResourceService:
    """
    CRUD service for one content resource backed by a SQLModel table.

    Every check (required fields, attachment type and size, slug uniqueness)
    runs before the upload, and the upload finishes before the store write,
    so a rejected request leaves no trace in either.
    """

    def __init__(
        self,
        session: AsyncSession,
        uploader: MediaUploader,
        *,
        model: Any,
        create_schema: Type[BaseModel],
        update_schema: Type[BaseModel],
        resource_name: str,
        media_folder: str,
        search_fields: Sequence[str] = ("title", "summary", "body"),
        tags_field: Optional[str] = "tags",
        author_field: str = "author_name",
        allowed_media_types: Sequence[str] = ALLOWED_IMAGE_TYPES,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self.session = session
        self.uploader = uploader
        self.model = model
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.resource_name = resource_name
        self.media_folder = media_folder
        self.search_fields = tuple(search_fields)
        self.tags_field = tags_field
        self.author_field = author_field
        self.allowed_media_types = tuple(allowed_media_types)
        self.max_upload_bytes = max_upload_bytes

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_create(self, fields: Dict[str, Any]) -> BaseModel:
        missing = [
            name
            for name, keys in required_field_keys(self.create_schema).items()
            if all(_is_blank(fields.get(key)) for key in keys)
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        try:
            return self.create_schema.model_validate(fields)
        except (PydanticValidationError, ValueError) as e:
            raise ValidationError(self._validation_message(e))

    def validate_update(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            payload = self.update_schema.model_validate(fields)
        except (PydanticValidationError, ValueError) as e:
            raise ValidationError(self._validation_message(e))
        return {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}

    def validate_attachment(self, attachment: Attachment) -> None:
        if attachment.mime_type not in self.allowed_media_types:
            raise ValidationError(
                f"Unsupported file format: {attachment.mime_type}. Upload only JPEG/JPG or PNG"
            )
        if attachment.size_bytes > self.max_upload_bytes:
            raise ValidationError(
                f"Attachment is too large. Maximum {self.max_upload_bytes // (1024 * 1024)}MB allowed"
            )

    @staticmethod
    def _validation_message(exc: Exception) -> str:
        if isinstance(exc, PydanticValidationError):
            return _format_validation_errors(exc)
        return str(exc)

    # ------------------------------------------------------------------
    # Store helpers
    # ------------------------------------------------------------------

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Store query failed for {self.resource_name}: {str(e)}", exc_info=True)
            raise StoreError(f"Failed to query {self.resource_name.lower()}s")

    async def _commit(self, slug: Optional[str] = None, exclude_id: Optional[int] = None) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            # The unique index on slug closes the check-then-write race
            if slug is not None and await self._slug_taken(slug, exclude_id):
                raise ConflictError(f"{self.resource_name} with this slug already exists")
            logger.error(f"Integrity error writing {self.resource_name}: {str(e)}", exc_info=True)
            raise StoreError(f"Failed to save {self.resource_name.lower()}")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Store write failed for {self.resource_name}: {str(e)}", exc_info=True)
            raise StoreError(f"Failed to save {self.resource_name.lower()}")

    async def _slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(self.model.id).where(self.model.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        result = await self._execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def ensure_slug_available(self, slug: str, exclude_id: Optional[int] = None) -> None:
        if await self._slug_taken(slug, exclude_id):
            raise ConflictError(f"{self.resource_name} with this slug already exists")

    async def _fetch(self, item_id: int):
        result = await self._execute(select(self.model).where(self.model.id == item_id))
        item = result.scalar_one_or_none()
        if item is None:
            logger.info(f"{self.resource_name} not found with ID: {item_id}")
            raise NotFoundError(f"{self.resource_name} not found")
        return item

    # ------------------------------------------------------------------
    # Upload pipeline
    # ------------------------------------------------------------------

    async def _upload(self, attachment: Attachment) -> UploadResult:
        try:
            return await self.uploader.upload(
                attachment.content,
                self.media_folder,
                filename=attachment.filename,
                content_type=attachment.mime_type,
            )
        except Exception as e:
            logger.error(f"Error uploading {self.resource_name.lower()} media: {str(e)}", exc_info=True)
            raise UploadError(f"Error uploading image: {str(e)}")

    async def _discard_upload(self, upload: UploadResult) -> None:
        try:
            await self.uploader.remove(upload.path)
        except Exception as e:
            logger.warning(f"Could not remove orphaned media {upload.path}: {str(e)}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(self, decoded: DecodedRequest):
        payload = self.validate_create(decoded.fields)
        if decoded.attachment is not None:
            self.validate_attachment(decoded.attachment)

        await self.ensure_slug_available(payload.slug)

        upload = None
        if decoded.attachment is not None:
            upload = await self._upload(decoded.attachment)

        now = datetime.now(timezone.utc)
        item = self.model(
            **payload.model_dump(),
            media_url=upload.url if upload else "",
            published_at=now if payload.visible else None,
            created_at=now,
            updated_at=now,
        )
        self.session.add(item)
        try:
            await self._commit(slug=payload.slug)
        except (ConflictError, StoreError):
            if upload is not None:
                await self._discard_upload(upload)
            raise

        await self.session.refresh(item)
        logger.info(f"{self.resource_name} created successfully: {item.title} (id={item.id})")
        return item

    async def get_by_id(self, item_id: int):
        return await self._fetch(item_id)

    async def get_by_slug(self, slug: str):
        stmt = select(self.model).where(
            self.model.slug == slug.strip().lower(),
            self.model.visible == True,  # noqa: E712
        )
        result = await self._execute(stmt)
        item = result.scalar_one_or_none()
        if item is None:
            logger.info(f"{self.resource_name} not found with slug: {slug}")
            raise NotFoundError(f"{self.resource_name} not found")
        return item

    async def _paginate(
        self, conditions: List[Any], page: int, limit: int, *, whole_when_fits: bool
    ) -> Tuple[List[Any], Dict[str, int]]:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")

        count_result = await self._execute(select(func.count()).select_from(self.model).where(*conditions))
        total = count_result.scalar_one()

        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.published_at.desc(), self.model.id.desc())
        )
        if whole_when_fits:
            window = pagination_window(page, limit, total)
        else:
            window = ((page - 1) * limit, limit)
        if window is not None:
            offset, window_limit = window
            stmt = stmt.offset(offset).limit(window_limit)

        result = await self._execute(stmt)
        items = list(result.scalars().all())

        logger.info(
            f"{self.resource_name}s fetched: count={len(items)} total={total} "
            f"page={page} limit={limit}"
        )
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": page_count(total, limit),
        }
        return items, pagination

    async def list_items(self, params: ListParams) -> Tuple[List[Any], Dict[str, int]]:
        conditions = build_list_filters(
            self.model, params, self.search_fields, self.tags_field, self.dialect_name
        )
        return await self._paginate(conditions, params.page, params.limit, whole_when_fits=True)

    async def search(self, params: SearchParams) -> Tuple[List[Any], Dict[str, int]]:
        if params.is_empty():
            raise ValidationError("At least one search parameter is required (q, category, tag, or author)")

        conditions = build_search_filters(
            self.model, params, self.search_fields, self.author_field, self.tags_field, self.dialect_name
        )
        return await self._paginate(conditions, params.page, params.limit, whole_when_fits=False)

    async def update(self, item_id: int, decoded: DecodedRequest):
        if decoded.attachment is not None:
            raise ValidationError("Media cannot be replaced through an update")

        changes = self.validate_update(decoded.fields)
        item = await self._fetch(item_id)

        if "slug" in changes:
            await self.ensure_slug_available(changes["slug"], exclude_id=item_id)

        was_visible = item.visible
        for key, value in changes.items():
            setattr(item, key, value)

        now = datetime.now(timezone.utc)
        if item.visible and (not was_visible or item.published_at is None):
            item.published_at = now
        item.updated_at = now

        await self._commit(slug=changes.get("slug"), exclude_id=item_id)
        await self.session.refresh(item)
        logger.info(f"{self.resource_name} updated successfully: {item.title} (id={item.id})")
        return item

    async def delete(self, item_id: int):
        item = await self._fetch(item_id)
        try:
            await self.session.delete(item)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.resource_name}: {str(e)}", exc_info=True)
            raise StoreError(f"Failed to delete {self.resource_name.lower()}")
        await self._commit()
        logger.info(f"{self.resource_name} deleted successfully: {item.title} (id={item_id})")
        return item

    async def delete_all(self) -> int:
        result = await self._execute(delete(self.model))
        await self._commit()
        deleted_count = result.rowcount or 0
        logger.warning(f"All {self.resource_name.lower()}s deleted: {deleted_count}")
        return deleted_count

    async def list_categories(self) -> List[str]:
        stmt = (
            select(self.model.category)
            .where(self.model.visible == True)  # noqa: E712
            .distinct()
            .order_by(self.model.category)
        )
        result = await self._execute(stmt)
        return [category for category in result.scalars().all() if category]

    async def list_tags(self) -> List[str]:
        column = getattr(self.model, self.tags_field)
        result = await self._execute(select(column).where(self.model.visible == True))  # noqa: E712
        tags = set()
        for row_tags in result.scalars().all():
            tags.update(row_tags or [])
        return sorted(tags)

    async def stats(self) -> Dict[str, Any]:
        visible = self.model.visible == True  # noqa: E712

        async def count(*conditions) -> int:
            result = await self._execute(select(func.count()).select_from(self.model).where(*conditions))
            return result.scalar_one()

        since = datetime.now(timezone.utc) - timedelta(days=RECENT_DAYS)
        overview = {
            "total": await count(),
            "published": await count(visible),
            "drafts": await count(self.model.visible == False),  # noqa: E712
            "featured": await count(visible, self.model.featured == True),  # noqa: E712
            "recent": await count(visible, self.model.published_at >= since),
        }

        category_count = func.count().label("count")
        result = await self._execute(
            select(self.model.category, category_count)
            .where(visible)
            .group_by(self.model.category)
            .order_by(category_count.desc(), self.model.category)
        )
        categories = [{"category": category, "count": total} for category, total in result.all()]

        author = getattr(self.model, self.author_field)
        author_count = func.count().label("count")
        result = await self._execute(
            select(author, author_count)
            .where(visible)
            .group_by(author)
            .order_by(author_count.desc(), author)
            .limit(TOP_AUTHORS_LIMIT)
        )
        top_authors = [{"author": name, "count": total} for name, total in result.all()]

        return {"overview": overview, "categories": categories, "top_authors": top_authors}
