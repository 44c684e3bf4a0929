from fastapi import FastAPI
import logging

from glucose_wars.api.routes import router
from glucose_wars.session_store import sessions

app = FastAPI(title="glucose-wars", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("shutdown")
async def _shutdown() -> None:
    # Session clocks own asyncio tasks on this loop; cancel them before it closes.
    await sessions.shutdown()
    logger.info("Stopped all session clocks")


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "glucose-wars", "version": "0.1.0"}
