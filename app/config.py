"""
Configuration settings for the content API
Values are read from the environment (and a local .env file)
"""
import os
import tempfile
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = os.getenv('DEBUG', 'False') == 'True'

# Get mode (development or production)
MODE = os.getenv("MODE", "development")


def get_env_var(key: str, default: str = None) -> str:
    """Fetch an environment variable and raise an error if it's missing (unless default is provided)."""
    value = os.getenv(key, default)
    if value is None and default is None:
        raise ValueError(f"Missing environment variable: {key}")
    return value


# Database URL
# Production must be configured explicitly, staging/dev falls back to a local SQLite file
if MODE == "production":
    DATABASE_URL = get_env_var("PRODUCTION_DB_URL")
else:
    DATABASE_URL = get_env_var("STAGING_DB_URL", f"sqlite+aiosqlite:///{BASE_DIR / 'content.db'}")

# Create tables on startup (disable when migrations are managed with alembic)
AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "True") == "True"

# SSL Certificate handling for asyncpg (optional)
DB_SSL_CERT_CONTENT = os.getenv("DB_SSL_CERT", "")
DB_SSL_CERT_PATH: Optional[str] = None

if DB_SSL_CERT_CONTENT:
    DB_SSL_CERT_PATH = os.path.join(tempfile.gettempdir(), "db-ca.crt")
    # Write the certificate to a file at runtime
    with open(DB_SSL_CERT_PATH, "w") as f:
        f.write(DB_SSL_CERT_CONTENT)

# CORS Configuration
# Include both localhost and 127.0.0.1 as browsers treat them as different origins
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]

CORS_ALLOW_CREDENTIALS = True

# Media uploads
MEDIA_BUCKET = os.getenv("MEDIA_BUCKET", "content-media")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/jpg", "image/png"]


# Supabase Configuration
def get_supabase_url() -> str:
    """Get Supabase URL based on mode"""
    if MODE == "production":
        return get_env_var("PRODUCTION_SUPABASE_URL")
    return get_env_var("STAGING_SUPABASE_URL")


def get_supabase_token() -> str:
    """Get Supabase token based on mode"""
    if MODE == "production":
        return get_env_var("PRODUCTION_SUPABASE_TOKEN")
    return get_env_var("STAGING_SUPABASE_TOKEN")
