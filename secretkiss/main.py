from fastapi import FastAPI
import logging

from secretkiss.api import deps
from secretkiss.api.routes import router
from secretkiss.config import settings_from_env
from secretkiss.runtime import GameRuntime
from secretkiss.websocket_hub import FrameHub

settings = settings_from_env()

app = FastAPI(title="secret-kiss", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

app.state.runtime = GameRuntime(hub=FrameHub(), frame_hz=settings.frame_hz)
app.state.redis = None


@app.on_event("startup")
async def _startup() -> None:
    # Re-read so tests (and `uvicorn --reload`) see env changes made after import.
    current = settings_from_env()
    store, client = deps.build_best_score_store(current)
    app.state.redis = client
    await app.state.runtime.start(store=store)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await app.state.runtime.stop()
    deps.close_redis(app.state.redis)
    app.state.redis = None


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "secret-kiss", "version": "0.1.0"}
