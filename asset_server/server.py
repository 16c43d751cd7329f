"""HTTP service for random assets.

Built with ``create_app`` and served by uvicorn in factory mode:

    uvicorn asset_server.server:create_app --factory --port 8080
"""

import asyncio
import logging
import os
import platform
import threading
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from watchdog.observers import Observer

from .context import AssetContext, CategoryRuntime
from .facts import FactFileError, random_line
from .settings import Settings, load_settings
from .utils.formatting import extract_number, join_url

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


class AssetURL(BaseModel):
    url: str
    number: int


class AssetCount(BaseModel):
    count: int


class Health(BaseModel):
    status: str


def _format_time(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting asset server...")
    app.state.start_time = datetime.now(timezone.utc)

    assets = AssetContext(app.state.settings, observer_factory=app.state.observer_factory)
    assets.start()
    app.state.assets = assets

    yield

    logger.info("🛑 Shutting down asset server...")
    await asyncio.to_thread(assets.stop)


def _runtime(request: Request, name: str) -> CategoryRuntime:
    runtime = request.app.state.assets.get(name)
    if runtime is None:
        raise HTTPException(status_code=404, detail=f"Unknown category '{name}'")
    return runtime


def _send_random_file(request: Request, name: str) -> FileResponse:
    runtime = _runtime(request, name)
    filename = runtime.pick_random()
    path = Path(runtime.settings.directory) / filename
    if not path.is_file():
        logger.warning(f"[{runtime.settings.label}] {path} not found")
        raise HTTPException(status_code=404, detail=f"{filename} not found")
    return FileResponse(path, headers=NO_STORE)


def _add_category_routes(app: FastAPI, name: str):
    async def random_image(request: Request):
        return _send_random_file(request, name)

    async def random_image_any(request: Request, rest: str):
        return _send_random_file(request, name)

    async def random_url(request: Request) -> AssetURL:
        runtime = _runtime(request, name)
        filename = runtime.pick_random()
        return AssetURL(
            url=join_url(runtime.settings.base_url, filename),
            number=extract_number(filename),
        )

    async def count(request: Request) -> AssetCount:
        return AssetCount(count=_runtime(request, name).cache.count())

    app.add_api_route(f"/{name}/image", random_image, methods=["GET"])
    app.add_api_route(f"/{name}/image/{{rest:path}}", random_image_any, methods=["GET"])
    app.add_api_route(f"/{name}", random_url, methods=["GET"], response_model=AssetURL)
    app.add_api_route(f"/{name}/count", count, methods=["GET"], response_model=AssetCount)


def _add_fact_route(app: FastAPI, route: str, key: str, path: str):
    async def random_fact():
        try:
            line = random_line(path)
        except FactFileError as e:
            logger.error(f"Failed to read {key} from {path}: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})
        return {key: line}

    app.add_api_route(route, random_fact, methods=["GET"])


def _add_service_routes(app: FastAPI, settings: Settings):
    @app.get("/info")
    async def info(request: Request):
        handler_start = time.perf_counter()
        now = datetime.now(timezone.utc)
        start_time = request.app.state.start_time
        body = {
            "now": _format_time(now),
            "start_time": _format_time(start_time),
            "uptime_ms": int((now - start_time).total_seconds() * 1000),
            "python_version": platform.python_version(),
            "num_threads": threading.active_count(),
            "num_cpu": os.cpu_count(),
            "pid": os.getpid(),
        }
        body["latency_ms"] = int((time.perf_counter() - handler_start) * 1000)
        return JSONResponse(content=body, headers=NO_STORE)

    @app.get("/health", response_model=Health)
    async def health():
        return JSONResponse(content={"status": "ok"}, headers=NO_STORE)

    @app.get("/watch/status")
    async def watch_status(request: Request):
        return request.app.state.assets.status()

    if settings.index_file:
        index_file = settings.index_file

        @app.get("/")
        async def index():
            if not Path(index_file).is_file():
                raise HTTPException(status_code=404, detail="Index file not found")
            return FileResponse(index_file, headers=NO_STORE)


def create_app(settings: Optional[Settings] = None, observer_factory: Callable = Observer) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Resolved configuration. Loaded from the environment if omitted.
        observer_factory: Builds the watchdog observer for each category.
    """
    if settings is None:
        settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Asset Server", lifespan=lifespan)
    app.state.settings = settings
    app.state.observer_factory = observer_factory

    for name in settings.categories:
        _add_category_routes(app, name)
    _add_fact_route(app, "/quote", "quote", settings.quotes_file)
    _add_fact_route(app, "/joke", "joke", settings.jokes_file)
    _add_service_routes(app, settings)

    # Mounted last so API routes take precedence over static paths
    for name, category in settings.categories.items():
        app.mount(
            f"/{category.mount}",
            StaticFiles(directory=category.directory, check_dir=False),
            name=f"{name}-static",
        )

    return app
