"""
FastAPI application entry point
Main application initialization
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.config import AUTO_CREATE_TABLES, DEBUG, MODE
from app.common.errors import ContentError
from app.middleware.cors import setup_cors
from app.database import init_db, close_db
import logging

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Content Resource API",
    description="CRUD API for site content: blogs, documents, team members and events",
    version="0.1.0",
    debug=DEBUG,
)

# Setup CORS
setup_cors(app)


@app.exception_handler(ContentError)
async def content_error_handler(request: Request, exc: ContentError):
    """Render every content error as {"error": message} with its status code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Invalid query parameters use the same error body as the rest of the API"""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("query", "body"))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(messages) or "Invalid request"},
    )


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    logger.info(f"Starting application in {MODE} mode")
    if AUTO_CREATE_TABLES:
        await init_db()
    logger.info("Application started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on shutdown"""
    logger.info("Shutting down application")
    await close_db()
    logger.info("Application shut down successfully")


@app.get("/")
async def root():
    """Root endpoint - health check"""
    return JSONResponse({
        "message": "Content Resource API",
        "version": "0.1.0",
        "mode": MODE,
        "status": "running"
    })


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return JSONResponse({
        "status": "healthy",
        "mode": MODE
    })


# Content resources
from app.apps.blog.router import router as blog_router
app.include_router(blog_router, prefix="/api/blogs", tags=["blogs"])


if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.getenv("PORT", "5000"))
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=DEBUG,
        log_level="debug" if DEBUG else "info"
    )
