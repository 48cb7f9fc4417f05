# mediafetch/main.py
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.staticfiles import StaticFiles

from mediafetch.api.downloads import router as downloads_router
from mediafetch.api.events import router as events_router
from mediafetch.core.config import Settings, get_settings
from mediafetch.core.logging import configure_logging
from mediafetch.exceptions import MediaFetchError, MissingFields
from mediafetch.services.job_manager import JobManager
from mediafetch.services.notifier import NotificationHub
from mediafetch.services.storage import PUBLIC_ROUTE, DownloadDirectory

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage = DownloadDirectory(settings.DOWNLOAD_DIR)
    storage.ensure()
    hub = NotificationHub()

    app.state.settings = settings
    app.state.storage = storage
    app.state.hub = hub
    app.state.job_manager = JobManager(
        hub,
        storage,
        tool=settings.YTDLP_PATH,
        temp_basename=settings.TEMP_BASENAME,
        shutdown_grace=settings.SHUTDOWN_GRACE_SECONDS,
    )

    @app.exception_handler(MediaFetchError)
    async def media_fetch_error_handler(request: Request, exc: MediaFetchError):
        if exc.detail:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # no body, non-JSON body or wrongly typed fields
        return await media_fetch_error_handler(request, MissingFields(str(exc.errors())))

    @app.on_event("startup")
    async def on_startup():
        logger.info("Serving %s from %s", PUBLIC_ROUTE, storage.root)

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.job_manager.shutdown()

    app.include_router(downloads_router)
    app.include_router(events_router)

    # Serve finished downloads as static files
    app.mount(PUBLIC_ROUTE, StaticFiles(directory=str(storage.root)), name="downloads")

    # Optional bundled frontend; mounted last so it never shadows the API
    public_dir = Path(settings.PUBLIC_DIR)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="public")

    return app
