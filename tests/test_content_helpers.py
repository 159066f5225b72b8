"""
Unit tests for content helpers: listing pagination, field normalization,
required field discovery and the Supabase uploader
"""
import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from unittest.mock import MagicMock

from app.apps.blog.models import BlogPost
from app.apps.blog.schemas import BlogPostCreate
from app.apps.content.query import SearchParams, page_count, pagination_window, tag_contains
from app.apps.content.service import required_field_keys
from app.apps.media.uploader import SupabaseMediaUploader, build_object_path
from app.common.fields import normalize_slug, normalize_tags


class TestPagination:

    def test_window_for_second_page(self):
        assert pagination_window(page=2, limit=10, total=25) == (10, 10)

    def test_window_skipped_when_limit_covers_total(self):
        assert pagination_window(page=3, limit=10, total=10) is None
        assert pagination_window(page=1, limit=50, total=7) is None

    def test_page_count(self):
        assert page_count(25, 10) == 3
        assert page_count(20, 10) == 2
        assert page_count(0, 10) == 0


class TestTagConditions:

    def _compile(self, dialect, dialect_name):
        stmt = select(BlogPost.id).where(tag_contains(BlogPost.tags, "ai", dialect_name))
        return str(stmt.compile(dialect=dialect))

    def test_postgresql_expands_jsonb_array(self):
        sql = self._compile(postgresql.dialect(), "postgresql")

        assert "EXISTS" in sql
        assert "jsonb_array_elements_text(blog_posts.tags)" in sql

    def test_sqlite_expands_with_json_each(self):
        sql = self._compile(sqlite.dialect(), "sqlite")

        assert "EXISTS" in sql
        assert "json_each(blog_posts.tags)" in sql

    def test_search_params_empty(self):
        assert SearchParams(query="  ").is_empty()
        assert not SearchParams(tag="ai").is_empty()


class TestBlogPostModel:

    def test_timestamps_default_to_aware_utc(self):
        post = BlogPost(title="t", slug="s", summary="s", body="b", author_name="a")

        assert post.created_at.utcoffset().total_seconds() == 0
        assert post.updated_at.tzinfo is not None

    def test_timestamp_columns_store_timezone(self):
        columns = BlogPost.__table__.c

        assert columns.published_at.type.timezone is True
        assert columns.created_at.type.timezone is True
        assert columns.updated_at.type.timezone is True


class TestFields:

    def test_normalize_tags_dedupes_and_trims(self):
        assert normalize_tags([" ai ", "club", "ai", ""]) == ["ai", "club"]

    def test_normalize_tags_from_json_string(self):
        assert normalize_tags('["robotics", "ai"]') == ["robotics", "ai"]

    def test_normalize_tags_from_comma_string(self):
        assert normalize_tags("robotics, ai") == ["robotics", "ai"]

    def test_normalize_tags_none(self):
        assert normalize_tags(None) == []

    def test_normalize_tags_rejects_non_strings(self):
        with pytest.raises(ValueError):
            normalize_tags([1, 2])

    def test_normalize_slug(self):
        assert normalize_slug("  Hello-World ") == "hello-world"


class TestRequiredFieldKeys:

    def test_blog_required_fields_and_aliases(self):
        keys = required_field_keys(BlogPostCreate)

        assert list(keys) == ["title", "slug", "summary", "body", "author_name"]
        assert {"body", "content"} <= keys["body"]
        assert {"author_name", "authorName", "author"} <= keys["author_name"]


class TestSupabaseMediaUploader:

    def test_build_object_path_uses_extension(self):
        path = build_object_path("/blogs/", "Cover Photo.JPG", "image/jpeg")

        assert path.startswith("blogs/")
        assert path.endswith(".jpg")

    def test_build_object_path_guesses_extension(self):
        assert build_object_path("blogs", "upload", "image/png").endswith(".png")

    def test_build_object_path_is_unique(self):
        assert build_object_path("blogs", "a.png", "image/png") != build_object_path("blogs", "a.png", "image/png")

    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self):
        bucket = MagicMock()
        bucket.get_public_url.return_value = "https://project.supabase.co/storage/v1/object/public/media/blogs/x.png"
        client = MagicMock()
        client.storage.from_.return_value = bucket
        uploader = SupabaseMediaUploader(bucket_name="media", client=client)

        result = await uploader.upload(b"png-bytes", "blogs", filename="x.png", content_type="image/png")

        client.storage.from_.assert_called_with("media")
        bucket.upload.assert_called_once()
        upload_kwargs = bucket.upload.call_args.kwargs
        assert upload_kwargs["file"] == b"png-bytes"
        assert upload_kwargs["path"] == result.path
        assert upload_kwargs["file_options"] == {"content-type": "image/png"}
        assert result.path.startswith("blogs/")
        assert result.url == bucket.get_public_url.return_value

    @pytest.mark.asyncio
    async def test_upload_propagates_provider_errors(self):
        bucket = MagicMock()
        bucket.upload.side_effect = RuntimeError("quota exceeded")
        client = MagicMock()
        client.storage.from_.return_value = bucket
        uploader = SupabaseMediaUploader(bucket_name="media", client=client)

        with pytest.raises(RuntimeError, match="quota exceeded"):
            await uploader.upload(b"png-bytes", "blogs", filename="x.png", content_type="image/png")

    @pytest.mark.asyncio
    async def test_remove(self):
        bucket = MagicMock()
        client = MagicMock()
        client.storage.from_.return_value = bucket
        uploader = SupabaseMediaUploader(bucket_name="media", client=client)

        await uploader.remove("blogs/x.png")

        bucket.remove.assert_called_once_with(["blogs/x.png"])
