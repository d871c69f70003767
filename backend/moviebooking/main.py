import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from moviebooking.core.config import settings
from moviebooking.core.database import init_db
from moviebooking.core.errors import AppError
from moviebooking.core.logging_config import configure_logging
from moviebooking.api.routes import artists, genres, movies, users

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: create tables that do not exist yet
    """
    init_db()
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title="Movie Booking API",
    description="Movie catalog and user account backend",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware - allows frontend to make requests to backend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["access-token"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors as {"message": ...} with their status code"""
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request input as 400 with the first problem found"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


# All routes are prefixed with /api for consistency
app.include_router(users.router, prefix="/api")
app.include_router(artists.router, prefix="/api")
app.include_router(genres.router, prefix="/api")
app.include_router(movies.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": "Movie Booking API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}
