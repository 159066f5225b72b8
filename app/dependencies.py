"""
Shared dependencies for FastAPI routes
"""
from app.database import get_async_session
from app.apps.media.uploader import MediaUploader, supabase_media_uploader

# Database dependency (already defined in database.py)
# Just re-export it for convenience
get_db = get_async_session


def get_media_uploader() -> MediaUploader:
    """
    Media uploader used by the content services.
    Override in tests: app.dependency_overrides[get_media_uploader] = lambda: fake
    """
    return supabase_media_uploader
