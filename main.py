"""ReadAlong – FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from readalong.config import settings

# --- Configure logging so readalong.* loggers are visible alongside uvicorn ---
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:    %(name)s - %(message)s",
    stream=sys.stdout,
    force=True,  # override uvicorn's config
)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    from readalong.routes.sessions import _sessions

    log.info(
        "ReadAlong ready – language=%s, max_sessions=%d, tts=%s",
        settings.language,
        settings.max_sessions,
        "on" if settings.elevenlabs_api_key else "off",
    )

    yield

    log.info("Shutting down – dropping %d open sessions", len(_sessions))
    _sessions.clear()


app = FastAPI(title="ReadAlong", version="0.1.0", lifespan=lifespan)

# --- Register routers ---
from readalong.routes.sessions import router as sessions_router  # noqa: E402
from readalong.routes.stories import router as stories_router  # noqa: E402

app.include_router(stories_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
