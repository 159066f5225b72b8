"""
CORS middleware configuration
"""
from fastapi.middleware.cors import CORSMiddleware
from app.config import CORS_ALLOWED_ORIGINS, CORS_ALLOW_CREDENTIALS


def setup_cors(app):
    """
    Setup CORS middleware for FastAPI app

    The admin panel submits blogs as multipart forms and the public site
    reads them with plain GETs; preflight OPTIONS is handled by the middleware.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
