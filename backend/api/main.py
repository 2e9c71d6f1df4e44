"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.errors import register_error_handlers
from api.routes import books
from db import init_db
from settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create app
app = FastAPI(
    title="Book Catalog API",
    description="CRUD API for books with externally hosted cover images",
    version="0.1.0",
)

# CORS middleware for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Covers are served from disk only when the local asset store is active
if settings.ASSET_BACKEND == "local":
    media_path = Path(settings.MEDIA_ROOT)
    media_path.mkdir(parents=True, exist_ok=True)
    app.mount("/media", StaticFiles(directory=str(media_path)), name="media")

register_error_handlers(app)

# Include routers
app.include_router(books.router, prefix="/api/books", tags=["books"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables and the asset store on startup."""
    init_db()
    service = books.get_lifecycle_service()
    logger.info("Book catalog ready (asset store: %s)", type(service.asset_store).__name__)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Book Catalog API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
