"""
Main entrypoint for the FastAPI server
"""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
import uvicorn

from core.config import Settings, get_settings
from core.lifespan import lifespan
from core.logger import configure_logging, logger
from core.middleware import install_interceptors, log_request, stamp_server_header
from core.security import require_bearer_token

from api.files.routes import router as files_router
from api.uploads.routes import router as uploads_router

# Outermost first. The access gate stays last so it always sits directly
# in front of the router.
INTERCEPTORS = [stamp_server_header, log_request, require_bearer_token]


# Health check endpoint for monitoring
def health_check() -> PlainTextResponse:
    return PlainTextResponse("OK\n")


def root() -> PlainTextResponse:
    return PlainTextResponse("Egami is running\n")


def create_app(settings: Settings) -> FastAPI:
    """
    Build the application around an already loaded configuration
    """
    app = FastAPI(
        title="Egami",
        lifespan=lifespan,
        # Every GET path belongs to the file store, so no docs routes
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings

    app.add_api_route("/health", health_check, methods=["GET", "HEAD"], name="health")
    app.add_api_route("/", root, methods=["GET", "HEAD"], name="root")

    app.include_router(uploads_router)
    # Catch-all file route. This MUST be last to avoid catching other routes
    app.include_router(files_router)

    install_interceptors(app, INTERCEPTORS)
    return app


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging("INFO")
        logger.critical("Invalid configuration (is EGAMI_USER_TOKEN set?): %s", exc)
        raise SystemExit(1) from exc

    configure_logging(settings.LOG_LEVEL)
    app = create_app(settings)

    logger.info("listening on %s:%s", settings.SERVER_HOST, settings.SERVER_PORT)
    # Server header and request logging come from the interceptors
    uvicorn.run(
        app,
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        server_header=False,
        access_log=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
