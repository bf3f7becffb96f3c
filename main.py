"""
Bookshelf — application entry point.
"""

from __future__ import annotations

import logging
import pathlib
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import FileResponse

from api.ai import router as ai_router
from api.exception_handlers import setup_exception_handlers
from api.middleware import register_middleware
from api.routes import router as api_router
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.session import dispose_engine, init_db
from utils.errors import NotFoundError

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "openai", "anthropic", "urllib3", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

_API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def register_frontend(app: FastAPI, frontend_dir: pathlib.Path) -> None:
    """
    Serve the browser front end.

    ``/`` is the app page; unknown ``/api/*`` paths are JSON 404s; any
    other path is a real file under ``frontend_dir`` or the login page.
    """
    root = frontend_dir.resolve()

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(root / "index.html")

    @app.api_route("/api/{rest:path}", methods=_API_METHODS, include_in_schema=False)
    async def api_not_found(rest: str):
        raise NotFoundError("API endpoint not found")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def frontend_fallback(full_path: str) -> FileResponse:
        candidate = (root / full_path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        return FileResponse(root / "auth.html")


def create_app(settings: Settings = config) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting with %s", settings.summary())
        if settings.db_auto_create:
            await init_db()
        logger.info("Application ready to accept requests.")
        yield
        logger.info("Shutting down…")
        await dispose_engine()

    app = FastAPI(
        title="Bookshelf",
        version="1.0.0",
        description="Personal book-shelf tracker with optional AI helpers.",
        lifespan=lifespan,
    )

    register_middleware(app, settings)
    setup_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api")
    app.include_router(api_router, prefix="/api")
    app.include_router(ai_router, prefix="/api")

    register_frontend(app, pathlib.Path(settings.frontend_dir))

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
