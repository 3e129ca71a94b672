"""PulseBoard — caching proxy API behind the public-data dashboard tiles."""
from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pulseboard.cache import CacheStore
from pulseboard.config import Settings, settings
from pulseboard.engine import Dispatcher
from pulseboard.errors import NoFallbackAvailable
from pulseboard.routes import (
    bitcoin,
    earthquake,
    geocode,
    health,
    iss,
    news,
    stocks,
    weather,
    wikipedia,
)
from pulseboard.services.http import create_client

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("pulseboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = create_client(settings.HTTP_TIMEOUT)
    app.state.dispatcher = Dispatcher(
        client,
        CacheStore(recent_size=settings.RECENT_SIZE),
        random.Random(),
        attempts=settings.RETRY_ATTEMPTS,
        backoff=settings.RETRY_BACKOFF,
    )

    Settings.validate()

    log.info(
        "PulseBoard started — %d routes, port %s",
        len(app.routes),
        settings.PORT,
    )
    yield

    await client.aclose()
    log.info("PulseBoard shutdown complete")


app = FastAPI(
    title="PulseBoard",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NoFallbackAvailable)
async def no_fallback_handler(request: Request, exc: NoFallbackAvailable):
    return JSONResponse(exc.body(), status_code=exc.status_code)


app.include_router(health.router)
app.include_router(bitcoin.router)
app.include_router(earthquake.router)
app.include_router(geocode.router)
app.include_router(iss.router)
app.include_router(news.router)
app.include_router(stocks.router)
app.include_router(weather.router)
app.include_router(wikipedia.router)


def run() -> None:
    import uvicorn

    uvicorn.run(
        "pulseboard.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="info",
    )


if __name__ == "__main__":
    run()
