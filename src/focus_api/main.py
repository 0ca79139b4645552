import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import StorageError, ValidationError
from .logging_config import setup_logging
from .routers import focus as focus_router
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "focus",
        "description": "Log focus attempts and report success/failure statistics.",
    },
]


# PUBLIC_INTERFACE
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI application.

    Sets up logging from settings, CORS, the JSON error envelopes and the
    focus router.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Focus Guardian Backend",
        description="Backend API service for logging focus attempts and reporting success statistics.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": _jsonable_errors(exc),
            },
        )

    @app.exception_handler(ValidationError)
    async def entry_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Missing required fields caught at persistence time; same envelope as request validation."""
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": exc.message,
                "detail": [
                    {"loc": ["body", name], "msg": "Field required", "type": "missing"}
                    for name in exc.fields
                ],
            },
        )

    @app.exception_handler(StorageError)
    async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "StorageError", "message": str(exc), "detail": []},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(focus_router.router)
    return app


def _jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. the raised ValueError) from pydantic error details."""
    errors = []
    for err in exc.errors():
        cleaned = dict(err)
        ctx = cleaned.get("ctx")
        if ctx:
            cleaned["ctx"] = {k: str(v) for k, v in ctx.items()}
        errors.append(cleaned)
    return errors


app = create_app()
