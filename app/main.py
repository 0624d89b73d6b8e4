from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.internal.env_settings import Settings
from app.routers import api
from app.util.connection import create_client_session
from app.util.db import init_db
from app.util.log import logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings().app
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        config_dir=settings.config_dir,
    )
    init_db()

    app.state.client_session = create_client_session()
    logger.info(
        "Books service started",
        version=settings.version,
        openlibrary_base_url=settings.openlibrary_base_url,
    )
    try:
        yield
    finally:
        await app.state.client_session.close()
        logger.info("Books service stopped")


app = FastAPI(
    title="Books",
    version=Settings().app.version,
    lifespan=lifespan,
    openapi_url="/openapi.json" if Settings().app.openapi_enabled else None,
    debug=Settings().app.debug,
)

app.include_router(api.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
