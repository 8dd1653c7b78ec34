from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
import logging

from guessgame.api.routes import router
from guessgame.config import load_settings
from guessgame.runtime import init_runtime

_settings = load_settings()

app = FastAPI(title="guessgame", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=getattr(logging, _settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

from pathlib import Path

_package_dir = Path(__file__).resolve().parent
_project_root = _package_dir.parent

# Serve item images so the presentation layer can resolve `Item.image`.
# Use an absolute path so running from a different CWD (e.g., `pytest` from tests/) works.
_assets_dir = _project_root / "assets"
if _assets_dir.exists():
    app.mount("/ui-assets", StaticFiles(directory=str(_assets_dir), html=False), name="ui-assets")


@app.on_event("startup")
async def _startup() -> None:
    runtime = init_runtime(project_root=_project_root, settings=_settings)
    logger.info("guessgame ready with %d items", len(runtime.engine.pool))


@app.on_event("shutdown")
async def _shutdown() -> None:
    from guessgame.runtime import get_runtime

    await get_runtime().ticker.stop()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "guessgame", "version": "0.1.0"}
