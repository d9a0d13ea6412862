import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from jobboard.core.config import settings
from jobboard.core.logging import get_logger
from jobboard.db.base import Base
from jobboard.db.session import engine
from jobboard.services.mailer import Mailer

# Import all models so SQLAlchemy can discover them for table creation
from jobboard.models import User, CV, Company, Job, Favorite, Application, Comment, Message, ActivityLog  # noqa: F401

# Import API router
from jobboard.api.api import api_router

logger = get_logger("jobboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and service handles on startup, dispose the engine on shutdown."""
    Base.metadata.create_all(bind=engine)
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.state.mailer = Mailer(settings)
    logger.info(f"{settings.APP_NAME} started")
    yield
    engine.dispose()
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Job board: accounts, CVs, job postings, applications and moderation",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS Middleware - allowlist from env (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.BACKEND_CORS_ORIGINS.split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Any error not mapped to an HTTP status becomes a generic 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "An error occurred"})


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {"message": f"Welcome to {settings.APP_NAME} API"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Uploaded photos and CV files
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

# Include API router with /api prefix
app.include_router(api_router, prefix="/api")


def run() -> None:
    """Serve the app with uvicorn on ``settings.PORT``."""
    uvicorn.run("jobboard.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
