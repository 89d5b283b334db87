"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api import auth, feed, images
from src.api.error_handlers import register_error_handlers
from src.config import get_settings
from src.gql import graphql_router
from src.logging_config import configure_logging
from src.services.storage import IMAGE_URL_PREFIX, ImageStore

settings = get_settings()
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    ImageStore(settings.upload_dir).ensure_root()
    yield


app = FastAPI(
    title="Feed API",
    description="Social feed backend with REST and GraphQL surfaces",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:3001",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_error_handlers(app)

# Register routers
app.include_router(auth.router)
app.include_router(feed.router)
app.include_router(images.router)
app.include_router(graphql_router, prefix="/graphql")

app.mount(
    f"/{IMAGE_URL_PREFIX}",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name=IMAGE_URL_PREFIX,
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
