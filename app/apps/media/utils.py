"""
Supabase client utilities
"""
from supabase import Client, create_client
from app.config import get_supabase_url, get_supabase_token
import logging

logger = logging.getLogger(__name__)

# Singleton instance
_supabase_client = None


def get_supabase_client() -> Client:
    """
    Get Supabase client instance (singleton pattern).

    Returns:
        Client: Supabase client instance
    """
    global _supabase_client

    if _supabase_client is None:
        try:
            _supabase_client = create_client(get_supabase_url(), get_supabase_token())
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {str(e)}")
            raise

    return _supabase_client
