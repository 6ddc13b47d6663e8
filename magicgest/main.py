import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from magicgest.api import (
    alerts_router,
    budget_router,
    cards_router,
    collection_router,
    decks_router,
    export_router,
    health_router,
    prices_router,
    wishlist_router,
)
from magicgest.config import LOG_FORMAT, settings
from magicgest.db.database import Database
from magicgest.models.failure import KnownError, error_payload, storage_failure, unknown_failure
from magicgest.services.scryfall import ScryfallClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and Scryfall client on startup, close them on shutdown."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    database = Database(settings.database_url, echo=settings.debug)
    await database.create_all()
    app.state.database = database
    app.state.scryfall = ScryfallClient()
    logger.info("%s started (database: %s)", settings.app_name, database.engine.url)

    try:
        yield
    finally:
        await app.state.scryfall.aclose()
        await database.dispose()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("magicgest"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc.to_response()))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=error_payload(storage_failure(exc)))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_payload(unknown_failure(exc)))


app.include_router(alerts_router)
app.include_router(budget_router)
app.include_router(cards_router)
app.include_router(collection_router)
app.include_router(decks_router)
app.include_router(export_router)
app.include_router(health_router)
app.include_router(prices_router)
app.include_router(wishlist_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
