from contextlib import asynccontextmanager
from pathlib import Path
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from hobbi.core.config import settings
from hobbi.core.exceptions import AppError, app_error_handler
from hobbi.db.init_db import init_db
from hobbi.middleware.auth_logging import AuthLoggingMiddleware
from hobbi.middleware.request_logging import RequestLoggingMiddleware
from hobbi.modules.auth.api.router import router as auth_router
from hobbi.modules.comments.api.router import router as comments_router
from hobbi.modules.hobby_tags.api.router import router as hobby_tags_router
from hobbi.modules.posts.api.router import router as posts_router
from hobbi.modules.users.api.router import router as users_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    init_db()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    debug=settings.DEBUG,
    description="Share posts about your hobbies and browse a feed of the hobbies you follow",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Locally stored images when object storage is not configured
upload_root = Path(settings.UPLOAD_DIRECTORY)
upload_root.mkdir(parents=True, exist_ok=True)
app.mount(f"{settings.API_V1_STR}/static", StaticFiles(directory=upload_root), name="static")

# Register API routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["authentication"])
app.include_router(users_router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(hobby_tags_router, prefix=f"{settings.API_V1_STR}/hobby-tags", tags=["hobby tags"])
app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
app.include_router(comments_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}/comments", tags=["comments"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to Hobbi",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }
