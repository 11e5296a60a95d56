from fastapi import FastAPI
import logging

from memory_game.api.deps import shutdown_registry
from memory_game.api.routes import router
from memory_game.config import get_settings

settings = get_settings()

app = FastAPI(title="memory-game", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    logger.info("Timings: %s", settings.timings)


@app.on_event("shutdown")
async def _shutdown() -> None:
    # Cancels every live timer so no callback outlives the loop.
    shutdown_registry()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "memory-game", "version": "0.1.0"}
