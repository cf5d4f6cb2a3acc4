"""
Application assembly

initialize() builds the single process-wide FastAPI application on first
call and hands back the same instance afterwards. mount() includes a router
at most once per application.
"""

import logging
import threading
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .database import Base, engine
from .errors import register_exception_handlers
from .info import info
from .routers import ROUTERS

logger = logging.getLogger(__name__)

_app: Optional[FastAPI] = None
_lock = threading.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if config.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    logger.info(f"{info['name']} {info['version']} starting up...")
    yield
    # Shutdown
    logger.info(f"{info['name']} shutting down...")


def mount(app: FastAPI, *routers: APIRouter) -> FastAPI:
    """Include routers under /<API_VERSION>, skipping ones already mounted."""
    if not hasattr(app.state, "mounted_routers"):
        app.state.mounted_routers = set()
    for router in routers:
        if id(router) in app.state.mounted_routers:
            continue
        app.include_router(router, prefix=f"/{config.API_VERSION}")
        app.state.mounted_routers.add(id(router))
    return app


def create_app() -> FastAPI:
    app = FastAPI(
        title="Emergency Response Plans API",
        description=info["description"],
        version=info["version"],
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # TODO: bind oauth middlewares (authenticate, token, authorize) once a party directory issues tokens
    mount(app, *ROUTERS)

    @app.get("/")
    async def root():
        return {"status": "ok", **info}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


def initialize() -> FastAPI:
    """Return the shared application, building it on first call."""
    global _app
    if _app is None:
        with _lock:
            if _app is None:
                _app = create_app()
    return _app
