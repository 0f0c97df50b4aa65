'''
FastAPI application shell for the slot validation engine.

Business routes live with the calling services; this app only owns the
database lifespan, CORS and the mapping of validation failures to HTTP.
'''
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.error_handlers import register_error_handlers
from .common.config import settings
from .common.logger import log
from .database.engine import create_db_engine_and_session_factory, dispose_db_engine

LOCAL_ORIGINS = ["http://localhost", "http://localhost:3000", "http://localhost:5173"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"Booting {settings.APP_NAME} v{settings.APP_VERSION} (test mode: {settings.TEST_MODE}).")
    create_db_engine_and_session_factory()

    yield

    # Tests share one engine across TestClient instances.
    if settings.TEST_MODE:
        log.info("TEST_MODE: keeping the database engine alive.")
        return
    log.info("Shutting down, disposing the database engine...")
    await dispose_db_engine()


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # --- CORS ---
    application.add_middleware(
        CORSMiddleware,
        allow_origins=LOCAL_ORIGINS + settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(application)

    @application.get("/")
    async def health_check():
        return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

    return application


app = create_app()
