import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import NotFound, RemoteFailure, StorageUnavailable
from .logging_setup import setup_logging
from .routers import folders as folders_router
from .routers import session as session_router
from .routers import todos as todos_router
from .routers import views as views_router
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "session", "description": "Owner resolution for authenticated users and guests."},
    {
        "name": "todos",
        "description": "CRUD operations for Todo items with local fallback when the remote store fails.",
    },
    {"name": "folders", "description": "Color-coded categories for grouping todos."},
    {"name": "views", "description": "Calendar, timeline and counter projections of the owner's todos."},
]

_settings = get_settings()
setup_logging(_settings.log_level)

app = FastAPI(
    title="Study Planner",
    description="Task and study scheduling backend over a hosted table store with a local fallback cache.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(RemoteFailure)
async def remote_failure_handler(request: Request, exc: RemoteFailure) -> JSONResponse:
    """
    Reached only when the local cache could not stand in for the remote store.
    The store's own message is logged, never returned.
    """
    logger.error("Request %s %s failed without fallback: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=503,
        content={"error": "RemoteFailure", "message": "Failed to reach the task store"},
    )


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable) -> JSONResponse:
    logger.error("Local cache unavailable for %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=503,
        content={"error": "StorageUnavailable", "message": "Local storage is not available"},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the configured backends.
    """
    return {
        "message": "Healthy",
        "remote_backend": _settings.remote_backend,
        "cache_backend": _settings.cache_backend,
    }


# Include routers
app.include_router(session_router.router)
app.include_router(todos_router.router)
app.include_router(folders_router.router)
app.include_router(views_router.router)
