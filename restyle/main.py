from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from restyle.config import get_settings
from restyle.handlers import convert_handler, upload_handler
from restyle.services.orchestrator import get_orchestrator

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("restyle")


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    if get_orchestrator.cache_info().currsize:
        await get_orchestrator().close()


app = FastAPI(title="Restyle API", lifespan=lifespan)

app.include_router(convert_handler.router)
app.include_router(upload_handler.router)

if settings.storage_backend == "local":
    # Dev-only static serving for the local object store
    assets_root = Path(settings.static_dir)
    assets_root.mkdir(parents=True, exist_ok=True)
    app.mount("/assets", StaticFiles(directory=assets_root), name="assets")
    logger.info("Serving local object store from %s at /assets", assets_root.resolve())


@app.get("/healthz")
async def healthz():
    return {"status": "ok", "storage": settings.storage_backend}
