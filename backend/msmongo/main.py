from contextlib import asynccontextmanager
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .dispatcher import Dispatcher
from .errors import register_exception_handlers
from .logging_config import setup_logging
from .routers import action, health, rest
from .services.mongo import MongoStore

ALLOWED_HEADERS = [
    "X-Requested-With",
    "Accept",
    "Content-Type",
    "Content-Length",
    "Accept-Encoding",
    "X-CSRF-Token",
    "Authorization",
]
ALLOWED_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS"]


def create_app(settings: Optional[Settings] = None, store: Any = None) -> FastAPI:
    """
    Build the gateway app. Pass ``store`` to run against an existing store
    (tests inject a fake); otherwise MongoDB is connected on startup and a
    connection or ping failure aborts startup.
    """
    settings = settings or Settings.from_env()
    logger = setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.dispatcher is None:
            logger.info("Connecting to %s ...", settings.uri)
            try:
                owned = MongoStore.connect(settings.uri, settings.connect_timeout)
            except Exception:
                logger.critical("Could not connect to MongoDB, shutting down", exc_info=True)
                raise
            app.state.dispatcher = Dispatcher(owned, settings)
            logger.info("Connected to DB!")
        logger.info(
            "Routes ready: action=%s/{db}/{coll} rest=%s/{db}/{coll}",
            settings.action_prefix,
            settings.rest_prefix,
        )
        yield
        if owned is not None:
            owned.close()
            app.state.dispatcher = None
        logger.info("Gateway stopped")

    app = FastAPI(title="MS Mongo Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = Dispatcher(store, settings) if store is not None else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )
    register_exception_handlers(app)

    # Routers
    app.include_router(action.router, prefix=settings.action_prefix.rstrip("/"))
    app.include_router(rest.router, prefix=settings.rest_prefix.rstrip("/"))
    app.include_router(health.router)
    return app


def run() -> None:
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
