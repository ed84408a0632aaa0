"""
FastAPI application entry point.

Settings are read once here and passed down; the credential issuer is
built in the lifespan so that missing storage configuration stops the
server before it accepts requests.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from imgdrop import __version__
from imgdrop.api.router import api_router
from imgdrop.config import Settings
from imgdrop.errors import ConfigurationError
from imgdrop.middleware.metrics_middleware import MetricsMiddleware
from imgdrop.schemas.upload import ErrorResponse
from imgdrop.storage.presign import CredentialIssuer
from imgdrop.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: configure logging, build the credential issuer
    - Shutdown: nothing to release
    """
    settings: Settings = app.state.settings
    configure_logging('imgdrop-api', settings.log_level)

    if app.state.issuer is None:
        try:
            app.state.issuer = CredentialIssuer(settings.storage_config())
        except ConfigurationError as e:
            logger.critical(f"Refusing to start: {e.message}")
            raise

    logger.info(f"Upload server ready (environment={settings.environment})")
    yield


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if field:
        return f"{field}: {first.get('msg', 'invalid')}"
    return first.get("msg", "Invalid request")


def create_app(
    settings: Optional[Settings] = None,
    issuer: Optional[CredentialIssuer] = None
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings (read from the environment when omitted)
        issuer: Pre-built credential issuer; built from settings at startup when omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings()

    app = FastAPI(
        title="imgdrop",
        description="Presigned URL issuer for direct-to-storage image uploads",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.issuer = issuer

    # CORS middleware (browser clients call us cross-origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Metrics middleware (must be after CORS to track all requests)
    app.add_middleware(MetricsMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=_validation_message(exc)).model_dump()
        )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "imgdrop",
            "version": __version__,
            "environment": settings.environment
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return app


app = create_app()


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
