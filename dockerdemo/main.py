from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from dockerdemo.api.hello import router as hello_router
from dockerdemo.api.status import router as status_router
from dockerdemo.config.settings import Settings, settings as default_settings
from dockerdemo.services.database import Database
from dockerdemo.services.status_service import StatusService
from dockerdemo.utils.log import app_logger

PUBLIC_DIR = Path(__file__).resolve().parent / "public"


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API.

    When ``database`` is given the caller owns it; otherwise the lifespan
    creates one from ``settings`` and disposes it on shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup logic
        db = database or Database.from_settings(settings)
        app.state.database = db
        app.state.status_service = StatusService(db, timeout=settings.check_timeout)
        app_logger.info("app.startup", database=db.name, check_timeout=settings.check_timeout)
        try:
            yield
        finally:
            # Shutdown logic
            app.state.status_service = None
            app.state.database = None
            if database is None:
                db.dispose()
            app_logger.info("app.shutdown")

    app = FastAPI(title="Docker Demo", lifespan=lifespan)

    # include routes
    app.include_router(hello_router)
    app.include_router(status_router)

    # Serve the static UI that lives in public/
    app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    def index() -> FileResponse:
        return FileResponse(PUBLIC_DIR / "index.html")

    return app


app = create_app()
